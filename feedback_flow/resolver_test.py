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
from feedback_flow.resolver import WorkshopResolver
from feedback_flow.testing_utils import add_workshop
from feedback_shared.constants import WORKSHOPS_COLLECTION
from feedback_shared.types import ErrorCode


class WorkshopResolverTest(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDocumentStore()
        self.resolver = WorkshopResolver(self.store)

    def test_resolves_active_workshop(self):
        add_workshop(self.store, "wk-42", "aB3dE5fG7hJ9kL1m")

        result = self.resolver.resolve("aB3dE5fG7hJ9kL1m")

        self.assertTrue(result.ok)
        self.assertEqual(result.value.id, "wk-42")
        self.assertEqual(result.value.workshop_name, "Intro to Rust")

    def test_unknown_link_is_not_found(self):
        add_workshop(self.store, "wk-42", "aB3dE5fG7hJ9kL1m")

        self.assertEqual(self.resolver.resolve("nope").error, ErrorCode.NOT_FOUND)
        self.assertEqual(self.resolver.resolve("").error, ErrorCode.NOT_FOUND)

    def test_link_is_case_sensitive(self):
        add_workshop(self.store, "wk-42", "aB3dE5fG7hJ9kL1m")

        result = self.resolver.resolve("AB3DE5FG7HJ9KL1M")

        self.assertEqual(result.error, ErrorCode.NOT_FOUND)

    def test_inactive_workshop_is_refused(self):
        add_workshop(self.store, "wk-99", "zZ9yY8xX7wW6vV5u", is_active=False)

        result = self.resolver.resolve("zZ9yY8xX7wW6vV5u")

        self.assertEqual(result.error, ErrorCode.INACTIVE)
        self.assertIsNone(result.value)

    def test_duplicate_links_are_not_found(self):
        add_workshop(self.store, "wk-1", "dupdupdupdupdup1")
        add_workshop(self.store, "wk-2", "dupdupdupdupdup1")

        self.assertEqual(
            self.resolver.resolve("dupdupdupdupdup1").error, ErrorCode.NOT_FOUND
        )

    def test_resolution_is_repeatable(self):
        add_workshop(self.store, "wk-42", "aB3dE5fG7hJ9kL1m")

        first = self.resolver.resolve("aB3dE5fG7hJ9kL1m")
        second = self.resolver.resolve("aB3dE5fG7hJ9kL1m")

        self.assertEqual(first, second)
        self.assertEqual(len(self.store.collections[WORKSHOPS_COLLECTION]), 1)

    def test_store_error_is_lookup_failure(self):
        store = MagicMock()
        store.find.side_effect = ConnectionError("database unavailable")

        result = WorkshopResolver(store).resolve("aB3dE5fG7hJ9kL1m")

        self.assertEqual(result.error, ErrorCode.LOOKUP_FAILURE)
        self.assertIn("database unavailable", result.message)

    def test_malformed_workshop_is_lookup_failure(self):
        self.store.insert(
            WORKSHOPS_COLLECTION,
            {"workshop_name": "Intro to Rust", "unique_link": "aB3dE5fG7hJ9kL1m"},
        )

        result = self.resolver.resolve("aB3dE5fG7hJ9kL1m")

        self.assertEqual(result.error, ErrorCode.LOOKUP_FAILURE)
        self.assertIn("college_name", result.message)


if __name__ == "__main__":
    unittest.main()
