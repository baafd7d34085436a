from dataclasses import dataclass, field

STARTING_NOMINATIONS = 3
STARTING_VOTES = 10

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
PING_INTERVAL = 15
PING_TIMEOUT = 45
STATUS_INTERVAL = 20


@dataclass(frozen=True)
class SessionConfig:
    starting_nominations: int = STARTING_NOMINATIONS
    starting_votes: int = STARTING_VOTES

    def __post_init__(self):
        if self.starting_nominations < 1:
            raise ValueError("starting_nominations must be at least 1")
        if self.starting_votes < 1:
            raise ValueError("starting_votes must be at least 1")


@dataclass(frozen=True)
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    ping_interval: float | None = PING_INTERVAL
    ping_timeout: float | None = PING_TIMEOUT
    # 0 disables the periodic status line
    status_interval: float = STATUS_INTERVAL
    session: SessionConfig = field(default_factory=SessionConfig)
