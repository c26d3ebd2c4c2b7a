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
"""Shared fixtures for the feedback flow tests."""

from feedback_backend.db import InMemoryDocumentStore
from feedback_shared.constants import WORKSHOPS_COLLECTION

TEST_LINK = "aB3dE5fG7hJ9kL1m"


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def add_workshop(
    store: InMemoryDocumentStore,
    workshop_id: str = "wk-42",
    unique_link: str = TEST_LINK,
    is_active: bool = True,
    **extra,
) -> None:
    store.collections.setdefault(WORKSHOPS_COLLECTION, {})[workshop_id] = {
        "college_name": "Riverside College",
        "workshop_name": "Intro to Rust",
        "date": "2030-05-01",
        "time": "10:00",
        "instructions": "<p>Bring a laptop</p>",
        "unique_link": unique_link,
        "is_active": is_active,
        **extra,
    }
