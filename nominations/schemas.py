"""Inbound frame validation.

Every frame a client sends is checked here before it reaches the session
coordinator. Frames that are not JSON objects, carry an unknown ``type`` or
fail field validation are dropped (``parse_message`` returns ``None``).
"""

import logging
from typing import Annotated, Any, Dict, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StringConstraints,
    TypeAdapter,
    ValidationError,
)

from .protocol import parse_frame

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 64

Name = Annotated[
    str,
    StringConstraints(
        strict=True, strip_whitespace=True, min_length=1, max_length=NAME_MAX_LENGTH
    ),
]
Identifier = Annotated[str, StringConstraints(strict=True, min_length=1)]


class _Inbound(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class GreetMessage(_Inbound):
    type: Literal["GREET"]
    id: Identifier
    username: Name


class NominateMessage(_Inbound):
    type: Literal["NOMINATE"]
    nominater: Identifier
    nominee: Name
    unnominate: StrictBool


class VoteMessage(_Inbound):
    type: Literal["VOTE"]
    voter: Identifier
    candidate: Name
    upvote: StrictBool


class HeartbeatMessage(_Inbound):
    type: Literal["HEARTBEAT"]


InboundMessage = Annotated[
    Union[GreetMessage, NominateMessage, VoteMessage, HeartbeatMessage],
    Field(discriminator="type"),
]

_inbound_adapter: TypeAdapter = TypeAdapter(InboundMessage)


def validate_frame(frame: Dict[str, Any]) -> InboundMessage | None:
    try:
        return _inbound_adapter.validate_python(frame)
    except ValidationError as e:
        logger.debug(
            "Dropping invalid %s frame: %d error(s)", frame.get("type"), e.error_count()
        )
        return None


def parse_message(raw: Union[str, bytes]) -> InboundMessage | None:
    frame = parse_frame(raw)
    if frame is None:
        logger.debug("Dropping non-JSON-object frame")
        return None
    return validate_frame(frame)
