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
from typing import Callable

from feedback_flow.resolver import WorkshopResolver
from feedback_flow.validation import validate_feedback_form
from feedback_shared.api import FormDraft, Result, SubmissionRecord
from feedback_shared.constants import SUBMISSIONS_COLLECTION
from feedback_shared.interfaces import DocumentStore
from feedback_shared.types import ChannelKind, ErrorCode


class SubmissionAssembler:
    """Turns a finished FormDraft into exactly one stored SubmissionRecord."""

    def __init__(
        self,
        store: DocumentStore,
        resolver: WorkshopResolver,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.resolver = resolver
        self.clock = clock

    def submit(self, public_link: str, draft: FormDraft) -> Result[SubmissionRecord]:
        """
        Validates the draft and writes the submission.

        Every precondition is checked before the single write, so a failed
        call never leaves a partial record behind and may be retried with
        the same draft. The draft is not modified.
        """
        if not (
            draft.is_verified(ChannelKind.PHONE)
            and draft.is_verified(ChannelKind.EMAIL)
        ):
            return Result.failure(
                ErrorCode.VERIFICATION_INCOMPLETE,
                "Phone and email must both be verified before submitting",
            )

        errors = validate_feedback_form(draft)
        if errors:
            return Result.failure(
                ErrorCode.INVALID_PAYLOAD, "Please correct the form", errors
            )

        resolved = self.resolver.resolve(public_link)
        if resolved.error == ErrorCode.LOOKUP_FAILURE:
            return Result.failure(resolved.error, resolved.message)
        if not resolved.ok:
            return Result.failure(
                ErrorCode.WORKSHOP_NO_LONGER_ACTIVE,
                "This workshop is no longer accepting feedback",
            )
        workshop = resolved.value

        payload = {
            "workshop_id": workshop.id,
            "name": draft.name.strip(),
            "course": draft.course.strip(),
            "phone": draft.phone.strip(),
            "email": draft.email.strip(),
            "feedback": draft.feedback.strip(),
            "phone_verified": True,
            "email_verified": True,
            "submitted_at": self.clock(),
        }
        try:
            submission_id = self.store.insert(SUBMISSIONS_COLLECTION, payload)
        except Exception as e:
            return Result.failure(
                ErrorCode.PERSISTENCE_FAILURE, f"Failed to submit feedback: {e}"
            )
        return Result.success(SubmissionRecord(id=submission_id, **payload))
