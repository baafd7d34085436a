import argparse
import asyncio
import os
from urllib.parse import urlparse

from .client import HELP_TEXT, Client, colored


def _parse_server(uri_or_host: str | None, port: int | None) -> tuple[str, int]:
    if uri_or_host and uri_or_host.startswith("ws://"):
        p = urlparse(uri_or_host)
        return (p.hostname or "127.0.0.1", int(p.port or (port or 8080)))
    if uri_or_host and ":" in uri_or_host:
        host, _, bound = uri_or_host.partition(":")
        return (host or "127.0.0.1", int(bound))
    host = uri_or_host or os.getenv("CLIENT_HOST", "127.0.0.1")
    return (host, int(port or int(os.getenv("CLIENT_PORT", "8080"))))


def main():
    ap = argparse.ArgumentParser(description="Nomination and voting client")
    ap.add_argument("--server", help="ws://host:port of server")
    ap.add_argument("--host", help="Server host (if --server not given)")
    ap.add_argument("--port", type=int, help="Server port (default 8080)")
    args = ap.parse_args()

    print(colored("system", "=" * 60))
    print(colored("system", "Nominations client"))
    print(colored("system", "=" * 60))
    print(HELP_TEXT)

    host, port = _parse_server(args.server or args.host, args.port)
    client = Client()
    try:
        asyncio.run(client.run_client(host=host, port=port))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
