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

import hmac
import math
import time
from typing import Callable, Optional

from feedback_flow.validation import is_valid_target
from feedback_shared.api import CodeRequest, Result, VerificationChannel
from feedback_shared.constants import DEFAULT_COOLDOWN_SECONDS
from feedback_shared.interfaces import CodeDeliveryProvider
from feedback_shared.types import ErrorCode, ProofState


class VerificationGate:
    """
    Drives one VerificationChannel through its one-time-code challenge.

    The gate mutates the channel it is given. Sending and remembering codes is
    the provider's job; the gate only compares what the user typed against
    what the provider reports as issued, and tells the provider to forget a
    handle once it is superseded or used. The resend cooldown is an expiry
    timestamp on the channel, compared at call time.
    """

    def __init__(
        self,
        channel: VerificationChannel,
        provider: CodeDeliveryProvider,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.channel = channel
        self.provider = provider
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock

    def change_target(self, target: Optional[str]) -> None:
        """Points the channel at a new target, invalidating any outstanding code."""
        target = (target or "").strip()
        if target == self.channel.target:
            return
        self.channel.target = target
        self.channel.state = ProofState.UNSENT
        self._drop_handle()
        self.channel.attempts = 0

    def _drop_handle(self) -> None:
        if self.channel.handle:
            self.provider.discard(self.channel.handle)
        self.channel.handle = None

    def cooldown_remaining(self) -> float:
        return max(0.0, self.channel.cooldown_until - self.clock())

    def request_code(self, target: Optional[str] = None) -> Result[CodeRequest]:
        channel = self.channel
        target = channel.target if target is None else target.strip()

        if not is_valid_target(channel.kind, target):
            return Result.failure(
                ErrorCode.INVALID_TARGET, f"Please enter a valid {channel.kind}"
            )
        if channel.verified and target == channel.target:
            return Result.failure(
                ErrorCode.ALREADY_VERIFIED, f"The {channel.kind} is already verified"
            )

        self.change_target(target)

        remaining = self.cooldown_remaining()
        if remaining > 0:
            return Result.failure(
                ErrorCode.COOLDOWN_ACTIVE,
                f"Resend code in {math.ceil(remaining)}s",
            )

        try:
            handle = self.provider.send(channel.kind, target)
        except Exception as e:
            return Result.failure(
                ErrorCode.DELIVERY_FAILURE, f"Could not send verification code: {e}"
            )

        self._drop_handle()
        channel.handle = handle
        channel.state = ProofState.PENDING
        channel.cooldown_until = self.clock() + self.cooldown_seconds
        return Result.success(
            CodeRequest(
                kind=channel.kind,
                target=target,
                cooldown_until=channel.cooldown_until,
            )
        )

    def submit_code(self, code: str) -> Result[VerificationChannel]:
        channel = self.channel
        if channel.state == ProofState.VERIFIED:
            return Result.failure(
                ErrorCode.ALREADY_VERIFIED, f"The {channel.kind} is already verified"
            )
        if channel.state == ProofState.UNSENT or not channel.handle:
            return Result.failure(
                ErrorCode.CODE_NOT_REQUESTED, "Request a verification code first"
            )

        try:
            issued = self.provider.issued_code(channel.handle)
        except Exception as e:
            return Result.failure(
                ErrorCode.DELIVERY_FAILURE, f"Could not check verification code: {e}"
            )

        submitted = (code or "").strip()
        if issued is not None and hmac.compare_digest(
            submitted.encode("utf-8"), issued.encode("utf-8")
        ):
            channel.state = ProofState.VERIFIED
            self._drop_handle()
            return Result.success(channel)

        channel.state = ProofState.FAILED
        channel.attempts += 1
        return Result.failure(ErrorCode.CODE_MISMATCH, "Invalid OTP code")
