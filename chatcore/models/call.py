"""
Call signaling models.

Only signaling state is tracked; media never passes through the server.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from chatcore.models.base import CamelModel


class CallType(str, Enum):
    """Requested media kind."""

    VOICE = "voice"
    VIDEO = "video"


class CallStatus(str, Enum):
    """
    Call lifecycle.

    calling -> active -> ended
    calling -> ended

    ENDED is never stored: ending a call removes its record.
    """

    CALLING = "calling"
    ACTIVE = "active"
    ENDED = "ended"


class Call(CamelModel):
    """Live call record."""

    id: str
    chat_id: str
    caller_id: str
    caller_name: str
    type: CallType = CallType.VOICE
    participants: list[str] = Field(..., min_length=1)
    status: CallStatus = CallStatus.CALLING
    start_time: datetime
