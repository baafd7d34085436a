import asyncio
import logging
from typing import Any, Dict, Iterable, Optional

import websockets
from websockets.exceptions import ConnectionClosed

from .config import ServerConfig
from .schemas import parse_message
from .session import SessionCoordinator

# Frames queued for one client before it is treated as stuck and dropped
OUTBOX_LIMIT = 1000


class PeerConnection:
    def __init__(self, ws: Any):
        self.ws = ws
        self.participant_id: Optional[str] = None
        self.alive = True
        self.outbox: asyncio.Queue = asyncio.Queue(maxsize=OUTBOX_LIMIT)
        self._send_task: Optional[asyncio.Task] = None
        self._close_task: Optional[asyncio.Task] = None

    def enqueue(self, raw: str) -> None:
        if not self.alive:
            return
        try:
            self.outbox.put_nowait(raw)
        except asyncio.QueueFull:
            logging.warning(
                "Outbox full for %s; dropping connection", self.participant_id
            )
            self.alive = False
            self._close_task = asyncio.get_running_loop().create_task(self.ws.close())

    async def writer_loop(self):
        try:
            while True:
                raw = await self.outbox.get()
                await self.ws.send(raw)
        except ConnectionClosed as e:
            self.alive = False
            logging.warning("Failed to send to %s: %s", self.participant_id, e)
        except asyncio.CancelledError:
            pass

    async def close(self):
        self.alive = False
        try:
            await self.ws.close()
        except Exception:
            pass
        if self._send_task:
            self._send_task.cancel()
            try:
                await self._send_task
            except asyncio.CancelledError:
                pass


class ServerCore:
    """Accepts WebSocket clients and feeds their frames to the session.

    Also acts as the session's gateway: ``send``/``broadcast`` only enqueue on
    each connection's outbox, so they never suspend the caller.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        # Map websocket -> PeerConnection
        self.connections: Dict[Any, PeerConnection] = {}
        self.session = SessionCoordinator(self, self.config.session)

    def send(self, channel: PeerConnection, raw: str) -> None:
        channel.enqueue(raw)

    def broadcast(self, channels: Iterable[PeerConnection], raw: str) -> None:
        for channel in channels:
            channel.enqueue(raw)

    async def handler(self, ws: Any, path: Optional[str] = None):
        conn = PeerConnection(ws)
        self.connections[ws] = conn
        conn._send_task = asyncio.create_task(conn.writer_loop())
        conn.participant_id = self.session.connect(conn)
        try:
            await self.receive_loop(conn)
        finally:
            await self.cleanup_connection(conn)

    async def receive_loop(self, conn: PeerConnection):
        try:
            async for raw in conn.ws:
                message = parse_message(raw)
                if message is None:
                    continue
                try:
                    self.session.handle(conn.participant_id, message)
                except Exception:
                    logging.exception(
                        "Error handling %s from %s", message.type, conn.participant_id
                    )
        except ConnectionClosed:
            logging.info("Connection closed: %s", conn.participant_id)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logging.exception("Error in receive loop: %s", e)

    async def cleanup_connection(self, conn: PeerConnection):
        self.connections.pop(conn.ws, None)
        participant_id = self.session.registry.id_for(conn)
        if participant_id:
            self.session.disconnect(participant_id)
        await conn.close()

    def list_status(self) -> Dict[str, Any]:
        status = self.session.status()
        status["connections"] = len(self.connections)
        return status

    def status_line(self) -> str:
        st = self.list_status()
        return "Participants: %s; connections: %s; nominees: %s" % (
            st["participants"],
            st["connections"],
            st["nominees"],
        )


async def start_server(core: ServerCore):
    config = core.config
    server = await websockets.serve(
        core.handler,
        config.host,
        config.port,
        ping_interval=config.ping_interval,
        ping_timeout=config.ping_timeout,
    )
    logging.info("Nomination server listening on %s:%s", config.host, config.port)
    return server


async def main_loop(config: ServerConfig):
    core = ServerCore(config)
    server = await start_server(core)

    async def status_printer():
        while True:
            await asyncio.sleep(config.status_interval)
            logging.info(core.status_line())

    status_task = None
    if config.status_interval > 0:
        status_task = asyncio.create_task(status_printer())

    try:
        await asyncio.Event().wait()
    finally:
        if status_task:
            status_task.cancel()
            try:
                await status_task
            except asyncio.CancelledError:
                pass
        server.close()
        await server.wait_closed()
