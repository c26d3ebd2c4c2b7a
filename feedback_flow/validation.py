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

import datetime
import re
from typing import Dict, Mapping, Optional

from feedback_shared.api import FormDraft
from feedback_shared.constants import (
    MAX_CERTIFICATE_TEMPLATE_BYTES,
    MAX_FEEDBACK_LENGTH,
    MAX_WORKSHOP_NAME_LENGTH,
)
from feedback_shared.types import ChannelKind

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[\d\s+\-()]{10,15}$")


def is_blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def is_valid_target(kind: ChannelKind, target: Optional[str]) -> bool:
    """Checks a phone number or email address before a code is sent to it."""
    if is_blank(target):
        return False
    pattern = PHONE_PATTERN if kind == ChannelKind.PHONE else EMAIL_PATTERN
    return bool(pattern.match(target.strip()))


def validate_feedback_form(draft: FormDraft) -> Dict[str, str]:
    """
    Validates the complete feedback payload.

    Returns:
        A mapping of field name to error message; empty when the form is valid.
    """
    errors: Dict[str, str] = {}

    if is_blank(draft.name):
        errors["name"] = "Name is required"

    if is_blank(draft.email):
        errors["email"] = "Email is required"
    elif not is_valid_target(ChannelKind.EMAIL, draft.email):
        errors["email"] = "Invalid email format"

    if is_blank(draft.phone):
        errors["phone"] = "Phone number is required"
    elif not is_valid_target(ChannelKind.PHONE, draft.phone):
        errors["phone"] = "Invalid phone number"

    if is_blank(draft.course):
        errors["course"] = "Course is required"

    if is_blank(draft.feedback):
        errors["feedback"] = "Feedback is required"
    elif len(draft.feedback) > MAX_FEEDBACK_LENGTH:
        errors["feedback"] = (
            f"Feedback must be less than {MAX_FEEDBACK_LENGTH} characters"
        )

    return errors


def validate_workshop_form(
    workshop: Mapping[str, object], today: Optional[datetime.date] = None
) -> Dict[str, str]:
    """Validates the fields an administrator enters for a new workshop."""
    errors: Dict[str, str] = {}
    today = today or datetime.date.today()

    workshop_name = str(workshop.get("workshop_name") or "")
    if is_blank(workshop_name):
        errors["workshop_name"] = "Workshop name is required"
    elif len(workshop_name) > MAX_WORKSHOP_NAME_LENGTH:
        errors["workshop_name"] = (
            f"Workshop name must be less than {MAX_WORKSHOP_NAME_LENGTH} characters"
        )

    if is_blank(str(workshop.get("college_name") or "")):
        errors["college_name"] = "College name is required"

    date_value = str(workshop.get("date") or "")
    if not date_value:
        errors["date"] = "Date is required"
    else:
        try:
            parsed = datetime.date.fromisoformat(date_value)
        except ValueError:
            errors["date"] = "Date must be in YYYY-MM-DD format"
        else:
            if parsed < today:
                errors["date"] = "Date cannot be in the past"

    if not workshop.get("time"):
        errors["time"] = "Time is required"

    if is_blank(str(workshop.get("instructions") or "")):
        errors["instructions"] = "Instructions are required"

    return errors


def validate_certificate_template(
    filename: Optional[str], content_type: Optional[str], size: int
) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not filename:
        errors["file"] = "File is required"
        return errors
    if content_type != "application/pdf" and not filename.lower().endswith(".pdf"):
        errors["file"] = "Only PDF files are allowed"
    if size > MAX_CERTIFICATE_TEMPLATE_BYTES:
        errors["file"] = "File size must be less than 5MB"
    return errors
