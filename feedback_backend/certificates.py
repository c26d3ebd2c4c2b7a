"""
Certificate template management. Template files live in object storage under
`certificate-templates/`; the name of the active template is a settings
document.
"""

from __future__ import annotations

import logging
import time
import uuid
from pathlib import PurePosixPath
from typing import Callable, Optional

from feedback_backend.storage import StorageClient
from feedback_flow.validation import validate_certificate_template
from feedback_shared.api import CertificateTemplate
from feedback_shared.constants import (
    ACTIVE_CERTIFICATE_TEMPLATE_KEY,
    CERTIFICATE_TEMPLATES_PREFIX,
    SETTINGS_COLLECTION,
)
from feedback_shared.interfaces import Document, DocumentStore

logger = logging.getLogger(__name__)


class TemplateValidationError(Exception):
    def __init__(self, errors: dict[str, str]):
        super().__init__("Invalid certificate template")
        self.errors = errors


class TemplateNotFound(Exception):
    pass


class ActiveTemplateError(Exception):
    """Raised when deleting the template that is currently active."""


class CertificateTemplateService:
    def __init__(
        self,
        store: DocumentStore,
        storage: StorageClient,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.storage = storage
        self.clock = clock

    def _active_setting(self) -> Optional[Document]:
        docs = self.store.find(
            SETTINGS_COLLECTION, {"key": ACTIVE_CERTIFICATE_TEMPLATE_KEY}
        )
        return docs[0] if docs else None

    def active_template_name(self) -> Optional[str]:
        setting = self._active_setting()
        return setting.data.get("value") if setting else None

    def _names(self) -> list[str]:
        return [
            key[len(CERTIFICATE_TEMPLATES_PREFIX):]
            for key in self.storage.list_keys(CERTIFICATE_TEMPLATES_PREFIX)
        ]

    def list_templates(self) -> list[CertificateTemplate]:
        active = self.active_template_name()
        return [
            CertificateTemplate(
                name=name,
                url=self.storage.presign_get(CERTIFICATE_TEMPLATES_PREFIX + name),
                is_active=name == active,
            )
            for name in self._names()
        ]

    def upload(
        self, filename: Optional[str], content_type: Optional[str], data: bytes
    ) -> CertificateTemplate:
        errors = validate_certificate_template(filename, content_type, len(data))
        if errors:
            raise TemplateValidationError(errors)

        name = f"{uuid.uuid4()}-{PurePosixPath(filename).name}"
        path = CERTIFICATE_TEMPLATES_PREFIX + name
        self.storage.upload_bytes(path, data, content_type="application/pdf")
        logger.info("Uploaded certificate template %s (%d bytes)", name, len(data))
        return CertificateTemplate(
            name=name, url=self.storage.presign_get(path), is_active=False
        )

    def set_active(self, name: str) -> None:
        if name not in self._names():
            raise TemplateNotFound(name)
        setting = self._active_setting()
        if setting is None:
            self.store.insert(
                SETTINGS_COLLECTION,
                {
                    "key": ACTIVE_CERTIFICATE_TEMPLATE_KEY,
                    "value": name,
                    "updated_at": self.clock(),
                },
            )
        else:
            self.store.update(
                SETTINGS_COLLECTION,
                setting.id,
                {"value": name, "updated_at": self.clock()},
            )
        logger.info("Active certificate template set to %s", name)

    def delete(self, name: str) -> None:
        if name == self.active_template_name():
            raise ActiveTemplateError("Cannot delete active template")
        if name not in self._names():
            raise TemplateNotFound(name)
        self.storage.delete(CERTIFICATE_TEMPLATES_PREFIX + name)
        logger.info("Deleted certificate template %s", name)
