"""
Administrator workshop management: creation with a unique public link,
listing, activation toggling, deletion and submission review.
"""

from __future__ import annotations

import logging
import secrets
import string
import time
from typing import Callable, Literal, Optional

from dacite import Config, from_dict

from feedback_flow.resolver import workshop_from_document
from feedback_flow.validation import validate_workshop_form
from feedback_shared.api import SubmissionRecord, Workshop
from feedback_shared.constants import (
    DRAFTS_COLLECTION,
    SUBMISSIONS_COLLECTION,
    UNIQUE_LINK_LENGTH,
    WORKSHOPS_COLLECTION,
)
from feedback_shared.interfaces import DocumentStore

logger = logging.getLogger(__name__)

LINK_ALPHABET = string.ascii_letters + string.digits
WORKSHOP_FIELDS = ("college_name", "workshop_name", "date", "time", "instructions")

WorkshopFilter = Literal["all", "active", "inactive"]


class WorkshopValidationError(Exception):
    def __init__(self, errors: dict[str, str]):
        super().__init__("Invalid workshop")
        self.errors = errors


class WorkshopNotFound(Exception):
    pass


def generate_unique_link(length: int = UNIQUE_LINK_LENGTH) -> str:
    return "".join(secrets.choice(LINK_ALPHABET) for _ in range(length))


class WorkshopService:
    def __init__(
        self,
        store: DocumentStore,
        public_base_url: str = "",
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.public_base_url = public_base_url.rstrip("/")
        self.clock = clock

    def _new_link(self) -> str:
        while True:
            link = generate_unique_link()
            if not self.store.find(WORKSHOPS_COLLECTION, {"unique_link": link}):
                return link

    def create(self, data: dict, admin_id: Optional[str] = None) -> Workshop:
        errors = validate_workshop_form(data)
        if errors:
            raise WorkshopValidationError(errors)

        now = self.clock()
        record = {name: str(data.get(name) or "").strip() for name in WORKSHOP_FIELDS}
        # Instructions are markup; keep them as entered.
        record["instructions"] = str(data.get("instructions") or "")
        record.update(
            {
                "is_active": bool(data.get("is_active", False)),
                "admin_id": admin_id,
                "unique_link": self._new_link(),
                "created_at": now,
                "updated_at": now,
            }
        )
        workshop_id = self.store.insert(WORKSHOPS_COLLECTION, record)
        logger.info("Created workshop %s (%s)", workshop_id, record["workshop_name"])
        return Workshop(id=workshop_id, **record)

    def save_draft(self, data: dict, admin_id: Optional[str] = None) -> str:
        """Stores an unfinished workshop form without validating it."""
        record = {name: data.get(name) for name in WORKSHOP_FIELDS}
        record.update(
            {
                "is_active": bool(data.get("is_active", False)),
                "admin_id": admin_id,
                "status": "draft",
                "updated_at": self.clock(),
            }
        )
        return self.store.insert(DRAFTS_COLLECTION, record)

    def list_workshops(self, status: WorkshopFilter = "all") -> list[Workshop]:
        workshops = [
            workshop_from_document(doc)
            for doc in self.store.list_all(WORKSHOPS_COLLECTION)
        ]
        if status == "active":
            return [w for w in workshops if w.is_active]
        if status == "inactive":
            return [w for w in workshops if not w.is_active]
        return workshops

    def get(self, workshop_id: str) -> Workshop:
        doc = self.store.get(WORKSHOPS_COLLECTION, workshop_id)
        if doc is None:
            raise WorkshopNotFound(workshop_id)
        return workshop_from_document(doc)

    def set_active(self, workshop_id: str, is_active: bool) -> Workshop:
        updated = self.store.update(
            WORKSHOPS_COLLECTION,
            workshop_id,
            {"is_active": is_active, "updated_at": self.clock()},
        )
        if not updated:
            raise WorkshopNotFound(workshop_id)
        logger.info(
            "Workshop %s is now %s", workshop_id, "active" if is_active else "inactive"
        )
        return self.get(workshop_id)

    def toggle(self, workshop_id: str) -> Workshop:
        return self.set_active(workshop_id, not self.get(workshop_id).is_active)

    def delete(self, workshop_id: str) -> None:
        if not self.store.delete(WORKSHOPS_COLLECTION, workshop_id):
            raise WorkshopNotFound(workshop_id)
        logger.info("Deleted workshop %s", workshop_id)

    def feedback_url(self, workshop: Workshop) -> str:
        return f"{self.public_base_url}/feedback/{workshop.id}/{workshop.unique_link}"

    def submissions(self, workshop_id: str) -> list[SubmissionRecord]:
        self.get(workshop_id)
        docs = self.store.find(SUBMISSIONS_COLLECTION, {"workshop_id": workshop_id})
        return [
            from_dict(
                data_class=SubmissionRecord,
                data=doc.as_dict(),
                config=Config(check_types=False),
            )
            for doc in docs
        ]
