import argparse
import asyncio
import logging
import os
import signal
from urllib.parse import urlparse

from .config import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    PING_INTERVAL,
    PING_TIMEOUT,
    STARTING_NOMINATIONS,
    STARTING_VOTES,
    STATUS_INTERVAL,
    ServerConfig,
    SessionConfig,
)
from .network_core import main_loop as core_main_loop


def _parse_bind(bind_uri: str) -> tuple[str, int]:
    # Accept ws://host:port, host:port or a bare port
    if bind_uri.startswith("ws://") or bind_uri.startswith("wss://"):
        p = urlparse(bind_uri)
        host = p.hostname or DEFAULT_HOST
        port = p.port or DEFAULT_PORT
        return host, int(port)
    if ":" in bind_uri:
        host, port = bind_uri.split(":", 1)
        host = host or "0.0.0.0"
        return host, int(port)
    return "0.0.0.0", int(bind_uri)


def _optional_seconds(value: str) -> float | None:
    # 0 / "off" disables WebSocket keepalive pings
    if value.lower() in ("off", "none", "0"):
        return None
    return float(value)


async def _run(config: ServerConfig) -> None:
    task = asyncio.create_task(core_main_loop(config))

    stop = asyncio.Event()

    def _signal_handler():
        stop.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows may not support SIGTERM
            pass

    logging.info(
        "Starting nomination server on %s:%s (nominations=%s, votes=%s)",
        config.host,
        config.port,
        config.session.starting_nominations,
        config.session.starting_votes,
    )
    try:
        await stop.wait()
    finally:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logging.info("Nomination server shutdown complete")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Nomination and voting server")
    parser.add_argument(
        "--bind",
        default=os.getenv("BIND", f"ws://{DEFAULT_HOST}:{DEFAULT_PORT}"),
        help="Bind address ws://host:port, host:port or port",
    )
    parser.add_argument(
        "--nominations",
        type=int,
        default=int(os.getenv("STARTING_NOMINATIONS", STARTING_NOMINATIONS)),
        help="Nominations each participant starts with",
    )
    parser.add_argument(
        "--votes",
        type=int,
        default=int(os.getenv("STARTING_VOTES", STARTING_VOTES)),
        help="Votes each participant starts with",
    )
    parser.add_argument(
        "--ping-interval",
        type=_optional_seconds,
        default=_optional_seconds(os.getenv("PING_INTERVAL", str(PING_INTERVAL))),
        help="Seconds between WebSocket pings ('off' to disable)",
    )
    parser.add_argument(
        "--ping-timeout",
        type=_optional_seconds,
        default=_optional_seconds(os.getenv("PING_TIMEOUT", str(PING_TIMEOUT))),
        help="Seconds to wait for a pong before dropping a client",
    )
    parser.add_argument(
        "--status-interval",
        type=float,
        default=float(os.getenv("STATUS_INTERVAL", STATUS_INTERVAL)),
        help="Seconds between status log lines (0 disables)",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    host, port = _parse_bind(args.bind)
    return ServerConfig(
        host=host,
        port=port,
        ping_interval=args.ping_interval,
        ping_timeout=args.ping_timeout,
        status_interval=args.status_interval,
        session=SessionConfig(
            starting_nominations=args.nominations,
            starting_votes=args.votes,
        ),
    )


def main():
    parser = build_parser()
    args = parser.parse_args()
    logging.basicConfig(
        level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(message)s"
    )
    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))
    asyncio.run(_run(config))


if __name__ == "__main__":
    main()
