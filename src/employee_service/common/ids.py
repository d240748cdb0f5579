from __future__ import annotations

import os
import time
import uuid
from typing import Optional, Protocol


class IDGenerator(Protocol):
    def new_id(self) -> str:
        raise NotImplementedError


def uuid7(*, timestamp_ms: Optional[int] = None) -> uuid.UUID:
    """RFC 9562 version 7 UUID: 48-bit unix millis followed by random bits."""
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    rand = int.from_bytes(os.urandom(10), "big")
    rand_a = rand >> 68
    rand_b = rand & ((1 << 62) - 1)
    value = (
        (timestamp_ms & ((1 << 48) - 1)) << 80
        | 0x7 << 76
        | rand_a << 64
        | 0b10 << 62
        | rand_b
    )
    return uuid.UUID(int=value)


class UUIDv7Generator:
    """Time-ordered string ids for employees and attendance records."""

    def new_id(self) -> str:
        return str(uuid7())
