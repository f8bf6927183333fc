from __future__ import annotations

import json
from typing import Any, Dict

from jsonschema import Draft202012Validator

from ..errors import CorruptStoreError
from .models import StoreDocument

_RECORD_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "directory", "timestamp"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "directory": {"type": "string", "minLength": 1},
        "timestamp": {"type": "string"},
    },
}

STORE_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "config": {
            "type": ["object", "null"],
            "properties": {"noita_root_dir": {"type": ["string", "null"]}},
        },
        "saves": {"type": "array", "items": _RECORD_SCHEMA},
        "trash": {"type": "array", "items": _RECORD_SCHEMA},
    },
}

_VALIDATOR = Draft202012Validator(STORE_SCHEMA)


def encode_document(document: StoreDocument) -> str:
    """Encode a StoreDocument to pretty-printed JSON."""
    return json.dumps(document.to_dict(), ensure_ascii=False, indent=2) + "\n"


def decode_document(text: str) -> StoreDocument:
    """Decode and validate store JSON.

    Raises CorruptStoreError for invalid JSON, schema violations or duplicate
    names across active and trashed saves.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CorruptStoreError(f"Invalid JSON (line {e.lineno}, column {e.colno}): {e.msg}") from e

    errors = sorted(_VALIDATOR.iter_errors(data), key=lambda err: [str(p) for p in err.path])
    if errors:
        details = "; ".join(
            f"{'/'.join(str(p) for p in err.path) or '<root>'}: {err.message}" for err in errors
        )
        raise CorruptStoreError(f"Store document does not match schema: {details}")

    document = StoreDocument.from_dict(data)
    names = [s.name for s in document.all_records()]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise CorruptStoreError(f"Duplicate save names in store: {', '.join(duplicates)}")
    return document
