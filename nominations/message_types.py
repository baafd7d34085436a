from enum import Enum


class ClientMessageType(str, Enum):
    GREET = "GREET"
    NOMINATE = "NOMINATE"
    VOTE = "VOTE"
    HEARTBEAT = "HEARTBEAT"


class ServerMessageType(str, Enum):
    GREET = "GREET"
    NOMINEES = "NOMINEES"
    UPDATE = "UPDATE"
    HEARTBEAT = "HEARTBEAT"


# Why a request was turned into a no-op (logged, never sent to clients)
class Rejection(str, Enum):
    UNKNOWN_PARTICIPANT = "UNKNOWN_PARTICIPANT"
    IDENTITY_MISMATCH = "IDENTITY_MISMATCH"
    NOT_GREETED = "NOT_GREETED"
    NO_NOMINATIONS_LEFT = "NO_NOMINATIONS_LEFT"
    NO_VOTES_LEFT = "NO_VOTES_LEFT"
    DUPLICATE_NOMINEE = "DUPLICATE_NOMINEE"
    UNKNOWN_NOMINEE = "UNKNOWN_NOMINEE"
    NOT_OWNER = "NOT_OWNER"
    NO_VOTE_TO_WITHDRAW = "NO_VOTE_TO_WITHDRAW"
