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

from dataclasses import dataclass, field
from typing import Dict, Generic, List, Optional, TypeVar

from feedback_shared.types import ChannelKind, ErrorCode, ProofState, Stage

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a workflow operation: either a value or an error code."""

    value: Optional[T] = None
    error: Optional[ErrorCode] = None
    message: str = ""
    fields: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        error: ErrorCode,
        message: str = "",
        fields: Optional[Dict[str, str]] = None,
    ) -> "Result[T]":
        return cls(error=error, message=message, fields=dict(fields or {}))


@dataclass
class Workshop:
    """Schema for a workshop stored in the workshops collection."""

    id: str
    college_name: str
    workshop_name: str
    date: str
    time: str
    instructions: str
    unique_link: str
    is_active: bool = False
    admin_id: Optional[str] = None
    created_at: Optional[float] = None
    updated_at: Optional[float] = None


@dataclass
class VerificationChannel:
    """Proof-of-reachability state for one contact channel."""

    kind: ChannelKind
    target: str = ""
    state: ProofState = ProofState.UNSENT
    # Delivery handle of the outstanding code, as returned by the provider.
    handle: Optional[str] = None
    cooldown_until: float = 0.0
    attempts: int = 0

    @property
    def verified(self) -> bool:
        return self.state == ProofState.VERIFIED


@dataclass
class CodeRequest:
    """Returned when a verification code was sent."""

    kind: ChannelKind
    target: str
    cooldown_until: float


@dataclass
class FormDraft:
    """The in-progress feedback form of one session."""

    name: str = ""
    course: str = ""
    phone: str = ""
    email: str = ""
    feedback: str = ""
    stage: Stage = Stage.PERSONAL_INFO
    channels: Dict[ChannelKind, VerificationChannel] = field(default_factory=dict)

    def channel(self, kind: ChannelKind) -> Optional[VerificationChannel]:
        return self.channels.get(kind)

    def contact(self, kind: ChannelKind) -> str:
        return (self.phone if kind == ChannelKind.PHONE else self.email).strip()

    def is_verified(self, kind: ChannelKind) -> bool:
        """True when the channel is verified for the value currently in the form."""
        channel = self.channels.get(kind)
        return bool(
            channel and channel.verified and channel.target == self.contact(kind)
        )


@dataclass(frozen=True)
class SubmissionRecord:
    """Schema for a completed feedback submission."""

    id: str
    workshop_id: str
    name: str
    course: str
    phone: str
    email: str
    feedback: str
    phone_verified: bool
    email_verified: bool
    submitted_at: float
    certificate_url: Optional[str] = None

    def __post_init__(self):
        if not (self.phone_verified and self.email_verified):
            raise ValueError("A submission requires both channels to be verified.")


@dataclass
class FeedbackSession:
    """Everything one attendee's form session owns between requests."""

    session_id: str
    public_link: str
    workshop_id: str
    draft: FormDraft = field(default_factory=FormDraft)
    submission: Optional[SubmissionRecord] = None
    created_at: float = 0.0


@dataclass
class CertificateTemplate:
    name: str
    url: str
    is_active: bool = False


@dataclass
class WorkshopStats:
    workshop_id: str
    workshop_name: str
    count: int
    completion_rate: int


@dataclass
class AnalyticsData:
    total_workshops: int
    active_workshops: int
    total_submissions: int
    completion_rate: int
    submissions_by_workshop: List[WorkshopStats] = field(default_factory=list)
