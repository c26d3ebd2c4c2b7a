"""
Storage for in-progress feedback sessions.

A session is the explicit context of one attendee's form: the resolved
workshop, the draft and both verification channels. It is serialized to JSON
between requests. The in-memory store keeps serialized copies too, so tests
exercise the same round trip as Redis.
"""

from __future__ import annotations

import json
import logging
import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from typing import ContextManager, Iterator, Optional, Protocol

import redis
from dacite import Config, DaciteError, from_dict
from redis import exceptions as redis_exceptions

from feedback_shared.api import FeedbackSession
from feedback_shared.types import ChannelKind, ProofState, Stage

logger = logging.getLogger(__name__)

DACITE_CONFIG = Config(cast=[Stage, ChannelKind, ProofState], check_types=False)


class SessionBusy(Exception):
    """Raised when a session stays locked by another request for too long."""


def dump_session(session: FeedbackSession) -> str:
    return json.dumps(asdict(session))


def load_session(raw: str | bytes) -> FeedbackSession:
    data = json.loads(raw)
    return from_dict(data_class=FeedbackSession, data=data, config=DACITE_CONFIG)


def new_session(public_link: str, workshop_id: str) -> FeedbackSession:
    return FeedbackSession(
        session_id=uuid.uuid4().hex,
        public_link=public_link,
        workshop_id=workshop_id,
        created_at=time.time(),
    )


class SessionStore(Protocol):
    def get(self, session_id: str) -> Optional[FeedbackSession]:
        ...

    def save(self, session: FeedbackSession) -> None:
        ...

    def delete(self, session_id: str) -> None:
        ...

    def lock(self, session_id: str) -> ContextManager:
        """Held around every load, change and save of one session."""
        ...


@dataclass
class InMemorySessionStore:
    """Process-local session store for tests/dev."""

    items: dict[str, str] = field(default_factory=dict)
    locks: dict[str, threading.Lock] = field(default_factory=dict)
    _locks_guard: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def get(self, session_id: str) -> Optional[FeedbackSession]:
        raw = self.items.get(session_id)
        return load_session(raw) if raw is not None else None

    def save(self, session: FeedbackSession) -> None:
        self.items[session.session_id] = dump_session(session)

    def delete(self, session_id: str) -> None:
        self.items.pop(session_id, None)

    def lock(self, session_id: str) -> threading.Lock:
        with self._locks_guard:
            return self.locks.setdefault(session_id, threading.Lock())

    def reset(self) -> None:
        self.items.clear()
        self.locks.clear()


@dataclass
class RedisSessionStore:
    """Redis-backed session store; sessions expire after `ttl_seconds` idle."""

    url: str
    ttl_seconds: int = 3600
    key_prefix: str = "feedback:session:"
    lock_timeout_seconds: float = 10.0

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    def get(self, session_id: str) -> Optional[FeedbackSession]:
        raw = self.client.get(self._key(session_id))
        if raw is None:
            return None
        try:
            return load_session(raw)
        except (DaciteError, ValueError, TypeError) as e:
            logger.warning("Discarding unreadable session %s: %s", session_id, e)
            self.client.delete(self._key(session_id))
            return None

    def save(self, session: FeedbackSession) -> None:
        self.client.setex(
            self._key(session.session_id), self.ttl_seconds, dump_session(session)
        )

    def delete(self, session_id: str) -> None:
        self.client.delete(self._key(session_id))

    @contextmanager
    def lock(self, session_id: str) -> Iterator[None]:
        """
        Holds a Redis lock on the session so concurrent requests from any
        worker apply their changes one after another.

        Raises:
            SessionBusy: if the lock could not be taken within
                `lock_timeout_seconds`.
        """
        lock = self.client.lock(
            f"{self._key(session_id)}:lock",
            timeout=self.lock_timeout_seconds,
            blocking_timeout=self.lock_timeout_seconds,
        )
        if not lock.acquire():
            raise SessionBusy("This form is busy with another request, try again")
        try:
            yield
        finally:
            try:
                lock.release()
            except redis_exceptions.LockError as e:
                logger.warning("Lock on session %s expired early: %s", session_id, e)
