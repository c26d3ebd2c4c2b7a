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

from dacite import Config, DaciteError, from_dict

from feedback_shared.api import Result, Workshop
from feedback_shared.constants import WORKSHOPS_COLLECTION
from feedback_shared.interfaces import Document, DocumentStore
from feedback_shared.types import ErrorCode


def workshop_from_document(doc: Document) -> Workshop:
    return from_dict(
        data_class=Workshop,
        data=doc.as_dict(),
        config=Config(check_types=False),
    )


class WorkshopResolver:
    """Resolves a public feedback link to the workshop it belongs to."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def resolve(self, public_link: str) -> Result[Workshop]:
        """
        Looks up the workshop for a public link.

        The link is an opaque, case-sensitive token. The lookup succeeds only
        when exactly one workshop carries the link and that workshop is active.

        Returns:
            A Result holding the Workshop, or NotFound / Inactive /
            LookupFailure.
        """
        if not public_link:
            return Result.failure(ErrorCode.NOT_FOUND, "Invalid workshop link")

        try:
            docs = self.store.find(WORKSHOPS_COLLECTION, {"unique_link": public_link})
        except Exception as e:
            return Result.failure(
                ErrorCode.LOOKUP_FAILURE, f"Error loading workshop: {e}"
            )

        if len(docs) != 1:
            return Result.failure(ErrorCode.NOT_FOUND, "Invalid workshop link")

        try:
            workshop = workshop_from_document(docs[0])
        except DaciteError as e:
            return Result.failure(
                ErrorCode.LOOKUP_FAILURE, f"Error loading workshop: {e}"
            )
        if not workshop.is_active:
            return Result.failure(
                ErrorCode.INACTIVE, "This workshop form is not currently active"
            )
        return Result.success(workshop)
