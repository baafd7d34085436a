from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class Nominee:
    name: str
    owner_id: str
    vote_count: int = 0

    def to_record(self) -> Dict[str, Any]:
        return {"name": self.name, "votes": self.vote_count, "nominater": self.owner_id}


class NominationTable:
    """Active nominees in nomination order, keyed by their unique name."""

    def __init__(self):
        # dicts keep insertion order, which is the order clients see
        self._nominees: Dict[str, Nominee] = {}

    def add(self, owner_id: str, name: str) -> Optional[Nominee]:
        if name in self._nominees:
            return None
        nominee = Nominee(name=name, owner_id=owner_id)
        self._nominees[name] = nominee
        return nominee

    def get(self, name: str) -> Optional[Nominee]:
        return self._nominees.get(name)

    def remove(self, name: str) -> Optional[Nominee]:
        return self._nominees.pop(name, None)

    def owned_by(self, owner_id: str) -> List[Nominee]:
        return [n for n in self._nominees.values() if n.owner_id == owner_id]

    def add_votes(self, name: str, delta: int) -> None:
        nominee = self._nominees[name]
        if nominee.vote_count + delta < 0:
            raise ValueError(f"vote count for {name!r} would go negative")
        nominee.vote_count += delta

    def snapshot(self) -> List[Dict[str, Any]]:
        return [n.to_record() for n in self._nominees.values()]

    def names(self) -> List[str]:
        return list(self._nominees)

    def __contains__(self, name: object) -> bool:
        return name in self._nominees

    def __len__(self) -> int:
        return len(self._nominees)
