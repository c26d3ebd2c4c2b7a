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

from enum import StrEnum


class Stage(StrEnum):
    """Stages of the feedback wizard, in order."""

    PERSONAL_INFO = "PERSONAL_INFO"
    PHONE_VERIFY = "PHONE_VERIFY"
    EMAIL_VERIFY = "EMAIL_VERIFY"
    FEEDBACK = "FEEDBACK"
    COMPLETE = "COMPLETE"


STAGE_ORDER = [
    Stage.PERSONAL_INFO,
    Stage.PHONE_VERIFY,
    Stage.EMAIL_VERIFY,
    Stage.FEEDBACK,
    Stage.COMPLETE,
]


class ChannelKind(StrEnum):
    PHONE = "phone"
    EMAIL = "email"


class ProofState(StrEnum):
    UNSENT = "unsent"
    PENDING = "pending"
    VERIFIED = "verified"
    FAILED = "failed"


class ErrorCode(StrEnum):
    """Error codes returned by the feedback workflow."""

    # Resolution
    NOT_FOUND = "NotFound"
    INACTIVE = "Inactive"
    LOOKUP_FAILURE = "LookupFailure"

    # Sequencing
    GUARD_NOT_SATISFIED = "GuardNotSatisfied"
    ALREADY_SUBMITTED = "AlreadySubmitted"

    # Verification (channel scoped)
    INVALID_TARGET = "InvalidTarget"
    COOLDOWN_ACTIVE = "CooldownActive"
    CODE_NOT_REQUESTED = "CodeNotRequested"
    CODE_MISMATCH = "CodeMismatch"
    ALREADY_VERIFIED = "AlreadyVerified"
    DELIVERY_FAILURE = "DeliveryFailure"

    # Assembly
    VERIFICATION_INCOMPLETE = "VerificationIncomplete"
    INVALID_PAYLOAD = "InvalidPayload"
    WORKSHOP_NO_LONGER_ACTIVE = "WorkshopNoLongerActive"
    PERSISTENCE_FAILURE = "PersistenceFailure"


# Stage at which each channel is verified.
CHANNEL_STAGES = {
    ChannelKind.PHONE: Stage.PHONE_VERIFY,
    ChannelKind.EMAIL: Stage.EMAIL_VERIFY,
}
