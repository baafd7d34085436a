import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .config import SessionConfig

logger = logging.getLogger(__name__)


@dataclass
class Participant:
    id: str
    nominations_remaining: int
    votes_remaining: int
    display_name: Optional[str] = None

    @property
    def greeted(self) -> bool:
        return self.display_name is not None

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.display_name,
            "nominations": self.nominations_remaining,
            "votes": self.votes_remaining,
        }


def _new_id() -> str:
    return str(uuid.uuid4())


class IdentityRegistry:
    """Connected participants, their budgets and their delivery channels.

    The channel stored per participant is only used to route outbound frames;
    participant state lives here and nowhere else.
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.config = config or SessionConfig()
        self._id_factory = id_factory
        # participant_id -> Participant
        self._participants: Dict[str, Participant] = {}
        # participant_id -> channel
        self._channels: Dict[str, Any] = {}

    def register(self, channel: Any) -> str:
        participant_id = self._id_factory()
        while participant_id in self._participants:
            logger.warning("Participant id collision on %s; regenerating", participant_id)
            participant_id = self._id_factory()
        self._participants[participant_id] = Participant(
            id=participant_id,
            nominations_remaining=self.config.starting_nominations,
            votes_remaining=self.config.starting_votes,
        )
        self._channels[participant_id] = channel
        return participant_id

    def set_display_name(self, participant_id: str, name: str) -> bool:
        participant = self._participants.get(participant_id)
        if participant is None:
            return False
        participant.display_name = name
        return True

    def release(self, participant_id: str) -> Optional[Participant]:
        self._channels.pop(participant_id, None)
        return self._participants.pop(participant_id, None)

    def get(self, participant_id: str) -> Optional[Participant]:
        return self._participants.get(participant_id)

    def channel_for(self, participant_id: str) -> Any:
        return self._channels.get(participant_id)

    def id_for(self, channel: Any) -> Optional[str]:
        for participant_id, ch in self._channels.items():
            if ch is channel:
                return participant_id
        return None

    def channels(self) -> List[Any]:
        return list(self._channels.values())

    def participant_ids(self) -> List[str]:
        return list(self._participants)

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._participants

    def __len__(self) -> int:
        return len(self._participants)

    # Budget ledger

    def try_spend_nomination(self, participant_id: str) -> bool:
        participant = self._participants.get(participant_id)
        if participant is None or participant.nominations_remaining <= 0:
            return False
        participant.nominations_remaining -= 1
        return True

    def try_spend_vote(self, participant_id: str) -> bool:
        participant = self._participants.get(participant_id)
        if participant is None or participant.votes_remaining <= 0:
            return False
        participant.votes_remaining -= 1
        return True

    def refund_nomination(self, participant_id: str) -> None:
        participant = self._participants.get(participant_id)
        if participant is not None:
            participant.nominations_remaining += 1

    def refund_vote(self, participant_id: str, count: int = 1) -> None:
        participant = self._participants.get(participant_id)
        if participant is not None:
            participant.votes_remaining += count
