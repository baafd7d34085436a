"""Session state machine.

``SessionCoordinator`` owns the identity registry, the nomination table and
the vote ledger, and is the only thing that mutates them. Every request is
handled as one synchronous step: validate preconditions, mutate, then hand
the resulting frames to the gateway. The gateway only enqueues, so no other
request can observe (or interleave with) a half-applied change.

Rejected requests are no-ops: nothing changes and nothing is broadcast.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from .config import SessionConfig
from .message_types import ClientMessageType, Rejection, ServerMessageType
from .nominees import Nominee, NominationTable
from .participants import IdentityRegistry, _new_id
from .protocol import make_message
from .schemas import InboundMessage
from .votes import VoteLedger

logger = logging.getLogger(__name__)


class Gateway(Protocol):
    def send(self, channel: Any, raw: str) -> None: ...

    def broadcast(self, channels: Iterable[Any], raw: str) -> None: ...


class SessionCoordinator:
    def __init__(
        self,
        gateway: Gateway,
        config: Optional[SessionConfig] = None,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.config = config or SessionConfig()
        self.gateway = gateway
        self.registry = IdentityRegistry(self.config, id_factory=id_factory)
        self.table = NominationTable()
        self.ledger = VoteLedger()

    # Connection lifecycle

    def connect(self, channel: Any) -> str:
        participant_id = self.registry.register(channel)
        participant = self.registry.get(participant_id)
        self.gateway.send(
            channel,
            make_message(
                ServerMessageType.GREET,
                id=participant_id,
                nominees=self.table.snapshot(),
                user=participant.to_record(),
            ),
        )
        logger.info(
            "Participant %s connected (%d online)", participant_id, len(self.registry)
        )
        return participant_id

    def disconnect(self, participant_id: str) -> bool:
        """Reconcile and forget a departing participant.

        Their own votes are withdrawn without refund. Nominees they own are
        deleted and every other voter on those nominees gets the spent votes
        back. The nominee list is broadcast once, at the end.
        """
        if participant_id not in self.registry:
            return False

        for name, n in self.ledger.tally_of(participant_id).items():
            self.table.add_votes(name, -n)
        self.ledger.drop(participant_id)

        affected: Dict[str, None] = {}
        for nominee in self.table.owned_by(participant_id):
            for voter_id in self._remove_nominee(nominee):
                affected[voter_id] = None

        self.registry.release(participant_id)
        for voter_id in affected:
            self._send_update(voter_id)
        self._broadcast_nominees()
        logger.info(
            "Participant %s disconnected (%d online)",
            participant_id,
            len(self.registry),
        )
        return True

    # Requests

    def handle(self, sender_id: str, message: InboundMessage) -> None:
        """Dispatch one validated frame received on ``sender_id``'s connection."""
        if message.type == ClientMessageType.HEARTBEAT:
            self.heartbeat(sender_id)
            return

        if message.type == ClientMessageType.GREET:
            acting_id = message.id
        elif message.type == ClientMessageType.NOMINATE:
            acting_id = message.nominater
        else:
            acting_id = message.voter
        if acting_id != sender_id:
            self._reject(message.type, sender_id, Rejection.IDENTITY_MISMATCH)
            return

        if message.type == ClientMessageType.GREET:
            self.greet(sender_id, message.username)
        elif message.type == ClientMessageType.NOMINATE:
            if message.unnominate:
                self.unnominate(sender_id, message.nominee)
            else:
                self.nominate(sender_id, message.nominee)
        elif message.type == ClientMessageType.VOTE:
            self.vote(sender_id, message.candidate, message.upvote)

        # The requester always learns its budget, changed or not
        self._send_update(sender_id)

    def greet(self, participant_id: str, username: str) -> bool:
        if not self.registry.set_display_name(participant_id, username):
            return self._reject("GREET", participant_id, Rejection.UNKNOWN_PARTICIPANT)
        logger.info("Participant %s is now %r", participant_id, username)
        return True

    def heartbeat(self, participant_id: str) -> None:
        channel = self.registry.channel_for(participant_id)
        if channel is not None:
            self.gateway.send(channel, make_message(ServerMessageType.HEARTBEAT))

    def nominate(self, owner_id: str, name: str) -> bool:
        participant = self.registry.get(owner_id)
        if participant is None:
            return self._reject("NOMINATE", owner_id, Rejection.UNKNOWN_PARTICIPANT)
        if not participant.greeted:
            return self._reject("NOMINATE", owner_id, Rejection.NOT_GREETED)
        if name in self.table:
            return self._reject("NOMINATE", owner_id, Rejection.DUPLICATE_NOMINEE)
        if not self.registry.try_spend_nomination(owner_id):
            return self._reject("NOMINATE", owner_id, Rejection.NO_NOMINATIONS_LEFT)

        self.table.add(owner_id, name)
        logger.info("%s nominated %r", owner_id, name)
        self._broadcast_nominees()
        return True

    def unnominate(self, owner_id: str, name: str) -> bool:
        if owner_id not in self.registry:
            return self._reject("UNNOMINATE", owner_id, Rejection.UNKNOWN_PARTICIPANT)
        nominee = self.table.get(name)
        if nominee is None:
            return self._reject("UNNOMINATE", owner_id, Rejection.UNKNOWN_NOMINEE)
        if nominee.owner_id != owner_id:
            return self._reject("UNNOMINATE", owner_id, Rejection.NOT_OWNER)

        self.registry.refund_nomination(owner_id)
        affected = self._remove_nominee(nominee)
        logger.info("%s withdrew nominee %r", owner_id, name)
        for voter_id in affected:
            # the owner gets its UPDATE as the requester
            if voter_id != owner_id:
                self._send_update(voter_id)
        self._broadcast_nominees()
        return True

    def vote(self, voter_id: str, candidate: str, upvote: bool) -> bool:
        action = "UPVOTE" if upvote else "DOWNVOTE"
        participant = self.registry.get(voter_id)
        if participant is None:
            return self._reject(action, voter_id, Rejection.UNKNOWN_PARTICIPANT)
        if not participant.greeted:
            return self._reject(action, voter_id, Rejection.NOT_GREETED)
        nominee = self.table.get(candidate)
        if nominee is None:
            return self._reject(action, voter_id, Rejection.UNKNOWN_NOMINEE)

        if upvote:
            if not self.registry.try_spend_vote(voter_id):
                return self._reject(action, voter_id, Rejection.NO_VOTES_LEFT)
            self.table.add_votes(candidate, 1)
            self.ledger.cast(voter_id, candidate)
        else:
            if nominee.vote_count <= 0 or not self.ledger.has_vote(voter_id, candidate):
                return self._reject(action, voter_id, Rejection.NO_VOTE_TO_WITHDRAW)
            self.ledger.withdraw(voter_id, candidate)
            self.table.add_votes(candidate, -1)
            self.registry.refund_vote(voter_id)

        logger.info(
            "%s %s %r (now %d)", voter_id, action.lower(), candidate, nominee.vote_count
        )
        self._broadcast_nominees()
        return True

    def status(self) -> Dict[str, Any]:
        return {
            "participants": len(self.registry),
            "nominees": self.table.names(),
        }

    # Helpers

    def _remove_nominee(self, nominee: Nominee) -> List[str]:
        """Delete ``nominee`` and refund its voters; returns the refunded voter ids."""
        refunds = self.ledger.purge_nominee(nominee.name)
        for voter_id, n in refunds.items():
            self.registry.refund_vote(voter_id, n)
        self.table.remove(nominee.name)
        return list(refunds)

    def _send_update(self, participant_id: str) -> None:
        participant = self.registry.get(participant_id)
        channel = self.registry.channel_for(participant_id)
        if participant is None or channel is None:
            return
        self.gateway.send(
            channel,
            make_message(ServerMessageType.UPDATE, user=participant.to_record()),
        )

    def _broadcast_nominees(self) -> None:
        self.gateway.broadcast(
            self.registry.channels(),
            make_message(ServerMessageType.NOMINEES, nominees=self.table.snapshot()),
        )

    def _reject(self, action: str, participant_id: str, reason: Rejection) -> bool:
        logger.info("Rejected %s from %s: %s", action, participant_id, reason.value)
        return False
