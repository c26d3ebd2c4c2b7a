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
import unittest
from unittest.mock import MagicMock

from feedback_backend.db import InMemoryDocumentStore
from feedback_flow.assembler import SubmissionAssembler
from feedback_flow.resolver import WorkshopResolver
from feedback_flow.testing_utils import TEST_LINK, FakeClock, add_workshop
from feedback_shared.api import FormDraft, VerificationChannel
from feedback_shared.constants import SUBMISSIONS_COLLECTION, WORKSHOPS_COLLECTION
from feedback_shared.types import ChannelKind, ErrorCode, ProofState, Stage


def verified_draft(**overrides) -> FormDraft:
    draft = FormDraft(
        name="Ada",
        course="CS101",
        phone="+15551234567",
        email="ada@example.com",
        feedback="Great session",
        stage=Stage.FEEDBACK,
    )
    for name, value in overrides.items():
        setattr(draft, name, value)
    draft.channels = {
        ChannelKind.PHONE: VerificationChannel(
            kind=ChannelKind.PHONE,
            target="+15551234567",
            state=ProofState.VERIFIED,
        ),
        ChannelKind.EMAIL: VerificationChannel(
            kind=ChannelKind.EMAIL,
            target="ada@example.com",
            state=ProofState.VERIFIED,
        ),
    }
    return draft


class SubmissionAssemblerTest(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDocumentStore()
        add_workshop(self.store)
        self.assembler = SubmissionAssembler(
            self.store, WorkshopResolver(self.store), clock=FakeClock(2000.0)
        )

    def submissions(self):
        return self.store.list_all(SUBMISSIONS_COLLECTION)

    def test_submit_writes_one_record(self):
        result = self.assembler.submit(TEST_LINK, verified_draft())

        self.assertTrue(result.ok)
        record = result.value
        self.assertEqual(record.workshop_id, "wk-42")
        self.assertEqual(record.name, "Ada")
        self.assertTrue(record.phone_verified)
        self.assertTrue(record.email_verified)
        self.assertEqual(record.submitted_at, 2000.0)

        stored = self.submissions()
        self.assertEqual(len(stored), 1)
        self.assertEqual(stored[0].id, record.id)
        self.assertEqual(stored[0].data["feedback"], "Great session")

    def test_unverified_email_writes_nothing(self):
        draft = verified_draft()
        draft.channels[ChannelKind.EMAIL].state = ProofState.PENDING

        store = MagicMock(wraps=self.store)
        assembler = SubmissionAssembler(store, WorkshopResolver(store))

        result = assembler.submit(TEST_LINK, draft)

        self.assertEqual(result.error, ErrorCode.VERIFICATION_INCOMPLETE)
        store.insert.assert_not_called()

    def test_verification_for_an_older_target_does_not_count(self):
        draft = verified_draft(phone="+15557654321")

        result = self.assembler.submit(TEST_LINK, draft)

        self.assertEqual(result.error, ErrorCode.VERIFICATION_INCOMPLETE)
        self.assertEqual(self.submissions(), [])

    def test_invalid_payload_reports_fields(self):
        result = self.assembler.submit(TEST_LINK, verified_draft(course="  "))

        self.assertEqual(result.error, ErrorCode.INVALID_PAYLOAD)
        self.assertIn("course", result.fields)
        self.assertEqual(self.submissions(), [])

    def test_workshop_deactivated_mid_session(self):
        self.store.update(WORKSHOPS_COLLECTION, "wk-42", {"is_active": False})

        result = self.assembler.submit(TEST_LINK, verified_draft())

        self.assertEqual(result.error, ErrorCode.WORKSHOP_NO_LONGER_ACTIVE)
        self.assertEqual(self.submissions(), [])

    def test_workshop_deleted_mid_session(self):
        self.store.delete(WORKSHOPS_COLLECTION, "wk-42")

        result = self.assembler.submit(TEST_LINK, verified_draft())

        self.assertEqual(result.error, ErrorCode.WORKSHOP_NO_LONGER_ACTIVE)

    def test_store_failure_is_reported_and_draft_kept(self):
        store = MagicMock(wraps=self.store)
        store.insert.side_effect = IOError("disk full")
        assembler = SubmissionAssembler(store, WorkshopResolver(store))
        draft = verified_draft()

        result = assembler.submit(TEST_LINK, draft)

        self.assertEqual(result.error, ErrorCode.PERSISTENCE_FAILURE)
        self.assertEqual(draft.feedback, "Great session")
        self.assertTrue(draft.is_verified(ChannelKind.PHONE))

        # Retrying with the same draft once the store recovers succeeds.
        store.insert.side_effect = None
        store.insert.return_value = "sub-1"
        self.assertEqual(assembler.submit(TEST_LINK, draft).value.id, "sub-1")


if __name__ == "__main__":
    unittest.main()
