# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import time
from typing import Callable, Optional

from feedback_flow.assembler import SubmissionAssembler
from feedback_flow.validation import is_blank, is_valid_target
from feedback_flow.verification import VerificationGate
from feedback_shared.api import (
    CodeRequest,
    FeedbackSession,
    FormDraft,
    Result,
    VerificationChannel,
)
from feedback_shared.constants import DEFAULT_COOLDOWN_SECONDS
from feedback_shared.interfaces import CodeDeliveryProvider
from feedback_shared.types import (
    CHANNEL_STAGES,
    STAGE_ORDER,
    ChannelKind,
    ErrorCode,
    Stage,
)


class StepSequencer:
    """
    Linear state machine over the feedback wizard stages.

    PERSONAL_INFO -> PHONE_VERIFY -> EMAIL_VERIFY -> FEEDBACK -> COMPLETE

    Each forward step re-checks the guards of every earlier stage as well as
    its own, so editing a field after stepping back can never carry the
    session past a guard it no longer satisfies. COMPLETE is absorbing.
    The sequencer mutates the session it wraps; persisting it is the
    caller's business.
    """

    def __init__(
        self,
        session: FeedbackSession,
        assembler: SubmissionAssembler,
        provider: CodeDeliveryProvider,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.session = session
        self.assembler = assembler
        self.provider = provider
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock

    @property
    def draft(self) -> FormDraft:
        return self.session.draft

    @property
    def stage(self) -> Stage:
        return self.draft.stage

    def _gate(self, channel: VerificationChannel) -> VerificationGate:
        return VerificationGate(
            channel,
            self.provider,
            cooldown_seconds=self.cooldown_seconds,
            clock=self.clock,
        )

    def _unmet_guard(self, stage: Stage) -> Optional[str]:
        """Returns why the session may not leave `stage`, or None."""
        draft = self.draft
        position = STAGE_ORDER.index(stage)
        if is_blank(draft.name) or is_blank(draft.course):
            return "Name and course are required"
        if position >= 1 and not draft.is_verified(ChannelKind.PHONE):
            return "Phone number must be verified"
        if position >= 2 and not draft.is_verified(ChannelKind.EMAIL):
            return "Email must be verified"
        if position >= 3 and is_blank(draft.feedback):
            return "Feedback is required"
        return None

    def _enter(self, stage: Stage) -> None:
        draft = self.draft
        draft.stage = stage
        for kind, channel_stage in CHANNEL_STAGES.items():
            if channel_stage == stage and kind not in draft.channels:
                draft.channels[kind] = VerificationChannel(
                    kind=kind, target=draft.contact(kind)
                )

    def _completed(self) -> Result:
        return Result.failure(
            ErrorCode.ALREADY_SUBMITTED, "Your feedback has already been submitted"
        )

    def advance(self) -> Result[Stage]:
        stage = self.stage
        if stage == Stage.COMPLETE:
            return self._completed()

        problem = self._unmet_guard(stage)
        if problem:
            return Result.failure(ErrorCode.GUARD_NOT_SATISFIED, problem)

        if stage == Stage.FEEDBACK:
            submitted = self.assembler.submit(self.session.public_link, self.draft)
            if not submitted.ok:
                return Result.failure(
                    submitted.error, submitted.message, submitted.fields
                )
            self.session.submission = submitted.value

        next_stage = STAGE_ORDER[STAGE_ORDER.index(stage) + 1]
        self._enter(next_stage)
        return Result.success(next_stage)

    def retreat(self) -> Result[Stage]:
        stage = self.stage
        if stage == Stage.COMPLETE:
            return self._completed()
        if stage == Stage.PERSONAL_INFO:
            return Result.failure(
                ErrorCode.GUARD_NOT_SATISFIED, "Already at the first step"
            )
        previous = STAGE_ORDER[STAGE_ORDER.index(stage) - 1]
        self.draft.stage = previous
        return Result.success(previous)

    def update_fields(
        self,
        *,
        name: Optional[str] = None,
        course: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        feedback: Optional[str] = None,
    ) -> Result[FormDraft]:
        """Applies field edits. Editing phone or email resets that channel."""
        if self.stage == Stage.COMPLETE:
            return self._completed()

        draft = self.draft
        if name is not None:
            draft.name = name
        if course is not None:
            draft.course = course
        if feedback is not None:
            draft.feedback = feedback
        for kind, value in ((ChannelKind.PHONE, phone), (ChannelKind.EMAIL, email)):
            if value is None:
                continue
            setattr(draft, kind.value, value)
            channel = draft.channel(kind)
            if channel is not None:
                self._gate(channel).change_target(value)
        return Result.success(draft)

    def _channel_for(self, kind: ChannelKind) -> Result[VerificationChannel]:
        if self.stage == Stage.COMPLETE:
            return self._completed()
        channel = self.draft.channel(kind)
        if self.stage != CHANNEL_STAGES[kind] or channel is None:
            return Result.failure(
                ErrorCode.GUARD_NOT_SATISFIED,
                f"The {kind} can only be verified at its own step",
            )
        return Result.success(channel)

    def request_code(
        self, kind: ChannelKind, target: Optional[str] = None
    ) -> Result[CodeRequest]:
        found = self._channel_for(kind)
        if not found.ok:
            return Result.failure(found.error, found.message)
        gate = self._gate(found.value)
        if target is not None:
            if not is_valid_target(kind, target):
                # The gate refuses it; the draft keeps its last good value.
                return gate.request_code(target)
            setattr(self.draft, kind.value, target)
        return gate.request_code(self.draft.contact(kind))

    def submit_code(self, kind: ChannelKind, code: str) -> Result[VerificationChannel]:
        found = self._channel_for(kind)
        if not found.ok:
            return found
        return self._gate(found.value).submit_code(code)
