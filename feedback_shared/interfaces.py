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

"""Interfaces the workflow core expects from its storage and delivery backends."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol

from feedback_shared.types import ChannelKind


@dataclass
class Document:
    id: str
    data: dict

    def as_dict(self) -> dict:
        return {**self.data, "id": self.id}


class DocumentStore(Protocol):
    """Interface for the document collections the service reads and writes."""

    def find(self, collection: str, predicate: Mapping[str, Any]) -> list[Document]:
        ...

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        ...

    def insert(self, collection: str, data: dict) -> str:
        ...

    def update(self, collection: str, doc_id: str, patch: dict) -> bool:
        ...

    def delete(self, collection: str, doc_id: str) -> bool:
        ...

    def list_all(self, collection: str, limit: Optional[int] = None) -> list[Document]:
        ...


class CodeDeliveryProvider(Protocol):
    """Sends one-time codes out of band and reports what it issued."""

    def send(self, kind: ChannelKind, target: str) -> str:
        """Delivers a new code to `target` and returns its delivery handle."""
        ...

    def issued_code(self, handle: str) -> Optional[str]:
        """The code behind `handle`, or None once it expired or was discarded."""
        ...

    def discard(self, handle: str) -> None:
        """Forgets a handle whose code is no longer needed."""
        ...
