"""
Code delivery providers for phone and email verification.

A provider sends a one-time code out of band and later reports which code it
issued for a delivery handle. Issued codes live in a code registry: in process
memory for a single worker, or in Redis so any worker can check a code another
worker sent. The fixed-code provider is a stand-in for local development and
tests; the webhook provider hands codes to an SMS/email gateway over HTTP.
"""

from __future__ import annotations

import logging
import math
import secrets
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Protocol

import redis
import requests
from redis import exceptions as redis_exceptions

from feedback_shared.constants import VERIFICATION_CODE_LENGTH
from feedback_shared.types import ChannelKind

logger = logging.getLogger(__name__)

DEFAULT_CODE_TTL_SECONDS = 10 * 60
DEFAULT_OUTBOX_LIMIT = 100


class DeliveryError(Exception):
    """Raised when a provider could not hand a code to its gateway."""


class CodeRegistry(Protocol):
    """Remembers issued codes by delivery handle until they expire."""

    def put(self, handle: str, code: str, ttl_seconds: float) -> None:
        ...

    def get(self, handle: str) -> Optional[str]:
        ...

    def discard(self, handle: str) -> None:
        ...


@dataclass
class InMemoryCodeRegistry:
    """Process-local registry; expired entries are dropped on every access."""

    clock: Callable[[], float] = time.time
    entries: Dict[str, tuple[str, float]] = field(default_factory=dict)

    def _purge(self) -> None:
        now = self.clock()
        expired = [
            handle
            for handle, (_, expires_at) in self.entries.items()
            if now >= expires_at
        ]
        for handle in expired:
            del self.entries[handle]

    def put(self, handle: str, code: str, ttl_seconds: float) -> None:
        self._purge()
        self.entries[handle] = (code, self.clock() + ttl_seconds)

    def get(self, handle: str) -> Optional[str]:
        self._purge()
        entry = self.entries.get(handle)
        return entry[0] if entry else None

    def discard(self, handle: str) -> None:
        self.entries.pop(handle, None)

    def reset(self) -> None:
        self.entries.clear()


@dataclass
class RedisCodeRegistry:
    """Redis-backed registry shared by all workers; Redis expires the keys."""

    url: str
    key_prefix: str = "feedback:code:"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _key(self, handle: str) -> str:
        return f"{self.key_prefix}{handle}"

    def put(self, handle: str, code: str, ttl_seconds: float) -> None:
        self.client.setex(self._key(handle), max(1, math.ceil(ttl_seconds)), code)

    def get(self, handle: str) -> Optional[str]:
        raw = self.client.get(self._key(handle))
        if raw is None:
            return None
        return raw.decode("utf-8") if isinstance(raw, bytes) else raw

    def discard(self, handle: str) -> None:
        try:
            self.client.delete(self._key(handle))
        except redis_exceptions.RedisError as e:
            # The key still expires on its own.
            logger.warning("Could not discard code %s: %s", handle, e)


@dataclass
class Delivery:
    handle: str
    kind: ChannelKind
    target: str
    code: str


def generate_code(length: int = VERIFICATION_CODE_LENGTH) -> str:
    return "".join(str(secrets.randbelow(10)) for _ in range(length))


@dataclass
class _IssuedCodes:
    """Bookkeeping shared by all providers."""

    code_ttl_seconds: float = DEFAULT_CODE_TTL_SECONDS
    clock: Callable[[], float] = time.time
    registry: Optional[CodeRegistry] = None

    def __post_init__(self):
        if self.registry is None:
            self.registry = InMemoryCodeRegistry(clock=self.clock)

    def _record(self, code: str) -> str:
        handle = uuid.uuid4().hex
        self.registry.put(handle, code, self.code_ttl_seconds)
        return handle

    def issued_code(self, handle: str) -> Optional[str]:
        return self.registry.get(handle)

    def discard(self, handle: str) -> None:
        self.registry.discard(handle)


@dataclass
class FixedCodeProvider(_IssuedCodes):
    """Accepts one constant code for every delivery. Never sends anything."""

    code: str = "123456"

    def send(self, kind: ChannelKind, target: str) -> str:
        handle = self._record(self.code)
        logger.info("Fixed-code delivery for %s (handle %s)", kind, handle)
        return handle


@dataclass
class InMemoryCodeProvider(_IssuedCodes):
    """Generates random codes and keeps the latest ones in an outbox for tests/dev."""

    outbox_limit: int = DEFAULT_OUTBOX_LIMIT
    outbox: list[Delivery] = field(default_factory=list)

    def send(self, kind: ChannelKind, target: str) -> str:
        code = generate_code()
        handle = self._record(code)
        self.outbox.append(Delivery(handle=handle, kind=kind, target=target, code=code))
        del self.outbox[: -self.outbox_limit]
        return handle

    def last_code_for(self, target: str) -> Optional[str]:
        for delivery in reversed(self.outbox):
            if delivery.target == target:
                return delivery.code
        return None


@dataclass
class WebhookCodeProvider(_IssuedCodes):
    """Posts each generated code to an SMS/email gateway webhook."""

    url: str = ""
    timeout_seconds: float = 5.0

    def __post_init__(self):
        super().__post_init__()
        if not self.url:
            raise ValueError("A webhook URL is required for WebhookCodeProvider")
        self._session = requests.Session()

    def send(self, kind: ChannelKind, target: str) -> str:
        code = generate_code()
        try:
            response = self._session.post(
                self.url,
                json={"channel": kind.value, "target": target, "code": code},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("Code delivery via %s failed: %s", self.url, e)
            raise DeliveryError(f"Could not deliver {kind} code") from e
        return self._record(code)
