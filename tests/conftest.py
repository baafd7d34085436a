import itertools
import json
from collections import defaultdict

import pytest

from nominations.config import SessionConfig
from nominations.session import SessionCoordinator


class RecordingGateway:
    """Collects every frame the coordinator emits, decoded."""

    def __init__(self):
        self.sent = defaultdict(list)  # channel -> [frame, ...]
        self.broadcasts = []

    def send(self, channel, raw):
        self.sent[channel].append(json.loads(raw))

    def broadcast(self, channels, raw):
        frame = json.loads(raw)
        self.broadcasts.append(frame)
        for channel in channels:
            self.sent[channel].append(frame)

    def last(self, channel, msg_type=None):
        frames = [f for f in self.sent[channel] if msg_type is None or f["type"] == msg_type]
        return frames[-1] if frames else None

    def clear(self):
        self.sent.clear()
        self.broadcasts.clear()


def sequential_ids(prefix="user"):
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def session(gateway):
    return SessionCoordinator(
        gateway,
        SessionConfig(starting_nominations=3, starting_votes=10),
        id_factory=sequential_ids(),
    )


@pytest.fixture
def join(session):
    """Connect a participant on channel ``ch-<name>`` and greet it as ``name``."""

    def _join(name, greet=True):
        participant_id = session.connect(f"ch-{name}")
        if greet:
            session.greet(participant_id, name)
        return participant_id

    return _join


def assert_invariants(session):
    config = session.config
    registry, table, ledger = session.registry, session.table, session.ledger
    for participant_id in registry.participant_ids():
        p = registry.get(participant_id)
        assert 0 <= p.nominations_remaining <= config.starting_nominations
        assert 0 <= p.votes_remaining <= config.starting_votes
        owned = len(table.owned_by(participant_id))
        assert p.nominations_remaining + owned == config.starting_nominations
        assert p.votes_remaining + len(ledger.votes_of(participant_id)) == config.starting_votes
    for name in table.names():
        nominee = table.get(name)
        assert nominee.owner_id in registry
        assert nominee.vote_count >= 0
        assert nominee.vote_count == ledger.count_for(name)
