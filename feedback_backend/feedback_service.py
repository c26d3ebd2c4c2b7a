"""
Attendee-facing feedback flow: opens sessions for public links and runs the
step sequencer against the stored session on every request.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

from feedback_backend.sessions import SessionStore, new_session
from feedback_flow.assembler import SubmissionAssembler
from feedback_flow.resolver import WorkshopResolver, workshop_from_document
from feedback_flow.sequencer import StepSequencer
from feedback_shared.api import (
    CodeRequest,
    FeedbackSession,
    FormDraft,
    Result,
    VerificationChannel,
    Workshop,
)
from feedback_shared.constants import DEFAULT_COOLDOWN_SECONDS, WORKSHOPS_COLLECTION
from feedback_shared.interfaces import CodeDeliveryProvider, DocumentStore
from feedback_shared.types import ChannelKind, ErrorCode, Stage

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionNotFound(Exception):
    """Raised when a session id is unknown or has expired."""


class FeedbackService:
    def __init__(
        self,
        store: DocumentStore,
        sessions: SessionStore,
        provider: CodeDeliveryProvider,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.sessions = sessions
        self.provider = provider
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock
        self.resolver = WorkshopResolver(store)
        self.assembler = SubmissionAssembler(store, self.resolver, clock=clock)

    def open_session(self, public_link: str) -> Result[FeedbackSession]:
        resolved = self.resolver.resolve(public_link)
        if not resolved.ok:
            logger.info("Refused feedback link %r: %s", public_link, resolved.error)
            return Result.failure(resolved.error, resolved.message)
        session = new_session(public_link, resolved.value.id)
        self.sessions.save(session)
        logger.info(
            "Opened feedback session %s for workshop %s",
            session.session_id,
            session.workshop_id,
        )
        return Result.success(session)

    def load(self, session_id: str) -> FeedbackSession:
        session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def workshop(self, session: FeedbackSession) -> Optional[Workshop]:
        doc = self.store.get(WORKSHOPS_COLLECTION, session.workshop_id)
        return workshop_from_document(doc) if doc else None

    def _run(
        self, session_id: str, operation: Callable[[StepSequencer], Result[T]]
    ) -> tuple[Result[T], FeedbackSession]:
        with self.sessions.lock(session_id):
            session = self.load(session_id)
            sequencer = StepSequencer(
                session,
                self.assembler,
                self.provider,
                cooldown_seconds=self.cooldown_seconds,
                clock=self.clock,
            )
            result = operation(sequencer)
            # Failed operations can still change state (e.g. a code mismatch).
            self.sessions.save(session)
        return result, session

    def update_fields(
        self, session_id: str, **fields: Optional[str]
    ) -> tuple[Result[FormDraft], FeedbackSession]:
        return self._run(session_id, lambda seq: seq.update_fields(**fields))

    def advance(self, session_id: str) -> tuple[Result[Stage], FeedbackSession]:
        result, session = self._run(session_id, lambda seq: seq.advance())
        if result.ok and result.value == Stage.COMPLETE:
            logger.info(
                "Stored submission %s for workshop %s",
                session.submission.id,
                session.workshop_id,
            )
        elif result.error == ErrorCode.PERSISTENCE_FAILURE:
            logger.error(
                "Submission for session %s failed: %s", session_id, result.message
            )
        return result, session

    def retreat(self, session_id: str) -> tuple[Result[Stage], FeedbackSession]:
        return self._run(session_id, lambda seq: seq.retreat())

    def request_code(
        self, session_id: str, kind: ChannelKind, target: Optional[str] = None
    ) -> tuple[Result[CodeRequest], FeedbackSession]:
        result, session = self._run(
            session_id, lambda seq: seq.request_code(kind, target)
        )
        if result.ok:
            logger.info("Sent %s code for session %s", kind, session_id)
        return result, session

    def submit_code(
        self, session_id: str, kind: ChannelKind, code: str
    ) -> tuple[Result[VerificationChannel], FeedbackSession]:
        result, session = self._run(session_id, lambda seq: seq.submit_code(kind, code))
        if result.ok:
            logger.info("Verified %s for session %s", kind, session_id)
        elif result.error == ErrorCode.CODE_MISMATCH:
            logger.info("Wrong %s code for session %s", kind, session_id)
        return result, session
