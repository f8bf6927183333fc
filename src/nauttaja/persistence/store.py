from __future__ import annotations

import copy
import logging
from typing import Callable, Optional

from ..errors import NotConfiguredError
from .backend import StoreBackend
from .codec import decode_document, encode_document
from .models import ExternalConfig, StoreDocument

logger = logging.getLogger(__name__)

Update = Callable[[StoreDocument], StoreDocument]


class SaveStore:
    """The persisted save record document and its read-modify-write protocol.

    ``transact`` is the only way to change the document. The update function
    receives a private copy; if it raises, nothing is written.
    """

    def __init__(self, backend: StoreBackend) -> None:
        self.backend = backend

    def load(self) -> StoreDocument:
        text = self.backend.read()
        if text is None:
            logger.debug("No store document yet; using defaults")
            return StoreDocument()
        return decode_document(text)

    def transact(self, update: Update) -> StoreDocument:
        current = self.load()
        updated = update(copy.deepcopy(current))
        if not isinstance(updated, StoreDocument):
            raise TypeError("Store update must return a StoreDocument")
        self.backend.write(encode_document(updated))
        return updated

    def require_config(self, document: Optional[StoreDocument] = None) -> ExternalConfig:
        doc = document if document is not None else self.load()
        if not doc.config.is_configured:
            raise NotConfiguredError()
        return doc.config
