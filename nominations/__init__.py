from .config import ServerConfig, SessionConfig
from .nominees import Nominee, NominationTable
from .participants import IdentityRegistry, Participant
from .schemas import parse_message
from .session import SessionCoordinator
from .votes import VoteLedger

__all__ = [
    "IdentityRegistry",
    "NominationTable",
    "Nominee",
    "Participant",
    "ServerConfig",
    "SessionConfig",
    "SessionCoordinator",
    "VoteLedger",
    "parse_message",
]
