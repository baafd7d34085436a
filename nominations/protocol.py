import json
from enum import Enum
from typing import Any, Dict, Union


def make_message(msg_type: Union[str, Enum], **fields: Any) -> str:
    """Serialize a flat outbound record: {"type": ..., **fields}."""
    if isinstance(msg_type, Enum):
        msg_type = msg_type.value
    return json.dumps({"type": msg_type, **fields}, separators=(",", ":"))


def parse_frame(raw: Union[str, bytes]) -> Dict[str, Any] | None:
    """Decode a received JSON frame; anything but a JSON object yields None."""
    try:
        frame = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError):
        return None
    if not isinstance(frame, dict):
        return None
    return frame
