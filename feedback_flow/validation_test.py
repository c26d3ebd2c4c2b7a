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
import unittest

from feedback_flow.validation import (
    is_valid_target,
    validate_certificate_template,
    validate_feedback_form,
    validate_workshop_form,
)
from feedback_shared.api import FormDraft
from feedback_shared.types import ChannelKind

TODAY = datetime.date(2030, 1, 15)


class TargetValidationTest(unittest.TestCase):
    def test_phone_numbers(self):
        self.assertTrue(is_valid_target(ChannelKind.PHONE, "+15551234567"))
        self.assertTrue(is_valid_target(ChannelKind.PHONE, "(555) 123-4567"))
        self.assertFalse(is_valid_target(ChannelKind.PHONE, "555-1234"))
        self.assertFalse(is_valid_target(ChannelKind.PHONE, "call me maybe"))
        self.assertFalse(is_valid_target(ChannelKind.PHONE, ""))

    def test_email_addresses(self):
        self.assertTrue(is_valid_target(ChannelKind.EMAIL, "ada@example.com"))
        self.assertFalse(is_valid_target(ChannelKind.EMAIL, "ada@example"))
        self.assertFalse(is_valid_target(ChannelKind.EMAIL, "ada @example.com"))
        self.assertFalse(is_valid_target(ChannelKind.EMAIL, None))


class FeedbackFormValidationTest(unittest.TestCase):
    def test_complete_form_has_no_errors(self):
        draft = FormDraft(
            name="Ada",
            course="CS101",
            phone="+15551234567",
            email="ada@example.com",
            feedback="Great session",
        )
        self.assertEqual(validate_feedback_form(draft), {})

    def test_empty_form_reports_every_field(self):
        errors = validate_feedback_form(FormDraft())
        self.assertEqual(
            set(errors), {"name", "course", "phone", "email", "feedback"}
        )

    def test_feedback_length_is_capped(self):
        draft = FormDraft(
            name="Ada",
            course="CS101",
            phone="+15551234567",
            email="ada@example.com",
            feedback="x" * 4001,
        )
        self.assertIn("feedback", validate_feedback_form(draft))


class WorkshopFormValidationTest(unittest.TestCase):
    def valid(self, **overrides):
        data = {
            "workshop_name": "Intro to Rust",
            "college_name": "Riverside College",
            "date": "2030-02-01",
            "time": "10:00",
            "instructions": "<p>Bring a laptop</p>",
        }
        data.update(overrides)
        return data

    def test_valid_workshop(self):
        self.assertEqual(validate_workshop_form(self.valid(), today=TODAY), {})

    def test_today_is_allowed(self):
        errors = validate_workshop_form(self.valid(date="2030-01-15"), today=TODAY)
        self.assertEqual(errors, {})

    def test_past_date_is_rejected(self):
        errors = validate_workshop_form(self.valid(date="2030-01-14"), today=TODAY)
        self.assertEqual(errors["date"], "Date cannot be in the past")

    def test_malformed_date_is_rejected(self):
        errors = validate_workshop_form(self.valid(date="01/02/2030"), today=TODAY)
        self.assertIn("date", errors)

    def test_long_name_is_rejected(self):
        errors = validate_workshop_form(
            self.valid(workshop_name="x" * 101), today=TODAY
        )
        self.assertIn("workshop_name", errors)

    def test_missing_fields(self):
        errors = validate_workshop_form({}, today=TODAY)
        self.assertEqual(
            set(errors),
            {"workshop_name", "college_name", "date", "time", "instructions"},
        )


class CertificateTemplateValidationTest(unittest.TestCase):
    def test_pdf_is_accepted(self):
        self.assertEqual(
            validate_certificate_template("cert.pdf", "application/pdf", 1024), {}
        )

    def test_other_types_are_rejected(self):
        errors = validate_certificate_template("cert.png", "image/png", 1024)
        self.assertEqual(errors["file"], "Only PDF files are allowed")

    def test_size_limit(self):
        errors = validate_certificate_template(
            "cert.pdf", "application/pdf", 5 * 1024 * 1024 + 1
        )
        self.assertEqual(errors["file"], "File size must be less than 5MB")

    def test_missing_file(self):
        self.assertIn("file", validate_certificate_template(None, None, 0))


if __name__ == "__main__":
    unittest.main()
