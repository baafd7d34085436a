import asyncio
import threading
from typing import Any, Callable, Dict, List, Optional

import websockets
from colorama import Fore, Style
from colorama import init as colorama_init
from websockets.exceptions import ConnectionClosed

from .message_types import ClientMessageType, ServerMessageType
from .protocol import make_message, parse_frame

NAME_COMMAND = "/name "
NOMINATE_COMMAND = "/nominate "
UNNOMINATE_COMMAND = "/unnominate "
VOTE_COMMAND = "/vote "
UNVOTE_COMMAND = "/unvote "
LIST_COMMAND = "/list"
PING_COMMAND = "/ping"
HELP_COMMAND = "/help"
CLOSE_COMMAND = "/quit"

HELP_TEXT = """Commands:
  /name <username>     - Set your display name (required before acting)
  /nominate <name>     - Propose a nominee
  /unnominate <name>   - Withdraw one of your nominees
  /vote <name>         - Spend a vote on a nominee
  /unvote <name>       - Take one of your votes back
  /list                - Show the current nominees
  /ping                - Heartbeat
  /quit                - Exit"""


def colored(kind: str, text: str) -> str:
    if kind == "error":
        return Fore.RED + text + Style.RESET_ALL
    if kind == "nominees":
        return Fore.CYAN + text + Style.RESET_ALL
    if kind == "budget":
        return Fore.GREEN + text + Style.RESET_ALL
    if kind == "system":
        return Fore.YELLOW + text + Style.RESET_ALL
    return text


def build_command(line: str, user_id: str) -> Optional[Dict[str, Any]]:
    """Turn a typed command into the frame to send, or None if it is not one."""
    line = line.strip()

    def _arg(prefix: str) -> Optional[str]:
        value = line[len(prefix) :].strip()
        return value or None

    if line.startswith(NAME_COMMAND):
        username = _arg(NAME_COMMAND)
        if username:
            return {"type": ClientMessageType.GREET.value, "id": user_id, "username": username}
    elif line.startswith(NOMINATE_COMMAND) or line.startswith(UNNOMINATE_COMMAND):
        unnominate = line.startswith(UNNOMINATE_COMMAND)
        name = _arg(UNNOMINATE_COMMAND if unnominate else NOMINATE_COMMAND)
        if name:
            return {
                "type": ClientMessageType.NOMINATE.value,
                "nominater": user_id,
                "nominee": name,
                "unnominate": unnominate,
            }
    elif line.startswith(VOTE_COMMAND) or line.startswith(UNVOTE_COMMAND):
        upvote = line.startswith(VOTE_COMMAND)
        name = _arg(VOTE_COMMAND if upvote else UNVOTE_COMMAND)
        if name:
            return {
                "type": ClientMessageType.VOTE.value,
                "voter": user_id,
                "candidate": name,
                "upvote": upvote,
            }
    elif line == PING_COMMAND:
        return {"type": ClientMessageType.HEARTBEAT.value}
    return None


def format_nominees(nominees: List[Dict[str, Any]], user_id: Optional[str] = None) -> str:
    if not nominees:
        return "No nominees yet."
    lines = []
    for n in nominees:
        mine = " (yours)" if user_id and n.get("nominater") == user_id else ""
        lines.append(f"  {n.get('votes', 0):>3}  {n.get('name')}{mine}")
    return "\n".join(lines)


class Client:
    def __init__(self, read_line: Callable[[], str] = input):
        self._read_line = read_line
        self.user_id: Optional[str] = None
        self.user: Dict[str, Any] = {}
        self.nominees: List[Dict[str, Any]] = []

    def apply_frame(self, frame: Dict[str, Any]) -> Optional[str]:
        """Update local state from a server frame; returns a line to print."""
        typ = frame.get("type")
        if typ == ServerMessageType.GREET:
            self.user_id = frame.get("id")
            self.user = frame.get("user") or {}
            self.nominees = frame.get("nominees") or []
            return colored(
                "system",
                f"[CONNECTED] id={self.user_id}; set a name with /name <username>",
            )
        if typ == ServerMessageType.NOMINEES:
            self.nominees = frame.get("nominees") or []
            return colored("nominees", format_nominees(self.nominees, self.user_id))
        if typ == ServerMessageType.UPDATE:
            self.user = frame.get("user") or {}
            return colored(
                "budget",
                f"[{self.user.get('name') or 'unnamed'}] "
                f"nominations left: {self.user.get('nominations')}, "
                f"votes left: {self.user.get('votes')}",
            )
        if typ == ServerMessageType.HEARTBEAT:
            return colored("system", "[HEARTBEAT] server alive")
        return None

    def _stdin_reader(self, loop: asyncio.AbstractEventLoop, lines: asyncio.Queue):
        # Runs on a daemon thread so a blocked read never holds up shutdown
        while True:
            try:
                line = self._read_line()
            except EOFError:
                line = None
            try:
                loop.call_soon_threadsafe(lines.put_nowait, line)
            except RuntimeError:
                return  # loop already closed
            if line is None:
                return

    async def sender(self, ws):
        loop = asyncio.get_running_loop()
        lines: asyncio.Queue = asyncio.Queue()
        threading.Thread(
            target=self._stdin_reader, args=(loop, lines), daemon=True
        ).start()
        while True:
            cmd = await lines.get()
            if cmd is None:
                await ws.close()
                return
            cmd = cmd.strip()
            if not cmd:
                continue
            if cmd == CLOSE_COMMAND:
                await ws.close()
                return
            if cmd == HELP_COMMAND:
                print(HELP_TEXT)
                continue
            if cmd == LIST_COMMAND:
                print(colored("nominees", format_nominees(self.nominees, self.user_id)))
                continue
            if not self.user_id:
                print(colored("error", "[CLIENT] Not greeted by server yet"))
                continue
            frame = build_command(cmd, self.user_id)
            if frame is None:
                print(colored("error", f"[CLIENT] Unknown command: {cmd} (try /help)"))
                continue
            msg_type = frame.pop("type")
            await ws.send(make_message(msg_type, **frame))

    async def receiver(self, ws):
        try:
            async for raw in ws:
                frame = parse_frame(raw)
                if frame is None:
                    continue
                line = self.apply_frame(frame)
                if line:
                    print(line)
        except ConnectionClosed:
            pass
        print(colored("system", "[CLIENT] Connection closed"))

    async def run_client(self, host="localhost", port=8080):
        colorama_init(autoreset=True)
        uri = f"ws://{host}:{port}"
        async with websockets.connect(uri) as ws:
            print(colored("system", f"[CLIENT] Connected to {uri}"))
            receive_task = asyncio.create_task(self.receiver(ws))
            send_task = asyncio.create_task(self.sender(ws))
            done, pending = await asyncio.wait(
                {receive_task, send_task}, return_when=asyncio.FIRST_COMPLETED
            )
            for task in pending:
                task.cancel()
            for task in done:
                task.result()
