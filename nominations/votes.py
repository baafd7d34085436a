from collections import Counter
from typing import Dict, List


class VoteLedger:
    """Per-participant sequences of the nominee names they currently back.

    A name may appear several times in one sequence: each occurrence is one
    spent vote.
    """

    def __init__(self):
        # participant_id -> [nominee name, ...] in casting order
        self._votes: Dict[str, List[str]] = {}

    def cast(self, voter_id: str, name: str) -> None:
        self._votes.setdefault(voter_id, []).append(name)

    def withdraw(self, voter_id: str, name: str) -> bool:
        """Remove the first occurrence of ``name`` from the voter's sequence."""
        sequence = self._votes.get(voter_id)
        if not sequence or name not in sequence:
            return False
        sequence.remove(name)
        if not sequence:
            del self._votes[voter_id]
        return True

    def has_vote(self, voter_id: str, name: str) -> bool:
        return name in self._votes.get(voter_id, ())

    def votes_of(self, voter_id: str) -> List[str]:
        return list(self._votes.get(voter_id, ()))

    def tally_of(self, voter_id: str) -> Counter:
        return Counter(self._votes.get(voter_id, ()))

    def count_for(self, name: str) -> int:
        return sum(seq.count(name) for seq in self._votes.values())

    def purge_nominee(self, name: str) -> Dict[str, int]:
        """Strip every vote on ``name``; returns voter_id -> votes removed."""
        removed: Dict[str, int] = {}
        for voter_id in list(self._votes):
            sequence = self._votes[voter_id]
            n = sequence.count(name)
            if not n:
                continue
            removed[voter_id] = n
            remaining = [v for v in sequence if v != name]
            if remaining:
                self._votes[voter_id] = remaining
            else:
                del self._votes[voter_id]
        return removed

    def drop(self, voter_id: str) -> List[str]:
        return self._votes.pop(voter_id, [])
