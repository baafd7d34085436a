import json

import pytest

from nominations.schemas import (
    GreetMessage,
    HeartbeatMessage,
    NominateMessage,
    VoteMessage,
    parse_message,
)


def raw(**fields):
    return json.dumps(fields)


def test_parses_each_inbound_kind():
    assert isinstance(parse_message(raw(type="GREET", id="u1", username="Ann")), GreetMessage)
    assert isinstance(parse_message(raw(type="HEARTBEAT")), HeartbeatMessage)

    nominate = parse_message(
        raw(type="NOMINATE", nominater="u1", nominee="Pizza", unnominate=False)
    )
    assert isinstance(nominate, NominateMessage)
    assert (nominate.nominater, nominate.nominee, nominate.unnominate) == ("u1", "Pizza", False)

    vote = parse_message(raw(type="VOTE", voter="u1", candidate="Pizza", upvote=True))
    assert isinstance(vote, VoteMessage)
    assert vote.upvote is True


def test_names_are_stripped_and_extra_fields_ignored():
    msg = parse_message(
        raw(type="NOMINATE", nominater="u1", nominee="  Pizza ", unnominate=False, extra=1)
    )
    assert msg.nominee == "Pizza"


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        "[1, 2, 3]",
        "42",
        raw(type="UNKNOWN"),
        raw(nominater="u1", nominee="Pizza", unnominate=False),
        raw(type="NOMINATE", nominater="u1", nominee="Pizza"),
        raw(type="NOMINATE", nominater="u1", nominee="Pizza", unnominate="false"),
        raw(type="NOMINATE", nominater="u1", nominee="", unnominate=False),
        raw(type="NOMINATE", nominater="u1", nominee="   ", unnominate=False),
        raw(type="NOMINATE", nominater="u1", nominee="x" * 65, unnominate=False),
        raw(type="NOMINATE", nominater=7, nominee="Pizza", unnominate=False),
        raw(type="VOTE", voter="u1", candidate="Pizza", upvote=1),
        raw(type="VOTE", voter="", candidate="Pizza", upvote=True),
        raw(type="GREET", id="u1"),
        raw(type="GREET", id="u1", username=None),
    ],
)
def test_malformed_frames_are_dropped(payload):
    assert parse_message(payload) is None


def test_deeply_nested_frames_are_dropped():
    depth = 200000
    assert parse_message("[" * depth) is None
    assert parse_message("[" * depth + "]" * depth) is None
    assert parse_message('{"type": ' * depth) is None


def test_accepts_bytes_frames():
    assert isinstance(parse_message(b'{"type": "HEARTBEAT"}'), HeartbeatMessage)
