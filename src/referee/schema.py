from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import jsonschema

SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "concise_candidates.schema.json"


class CandidateValidationError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


def load_schema(path: Optional[str] = None) -> dict[str, Any]:
    with open(path or SCHEMA_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def validate_candidates(records: list[dict[str, Any]], schema: Optional[dict[str, Any]] = None) -> None:
    """Check serialized candidates against the output contract; raise on the shallowest error."""
    schema = schema or load_schema()
    validator = jsonschema.Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(records), key=lambda e: len(list(e.absolute_path)))
    if errors:
        error = errors[0]
        details = {
            "path": list(error.absolute_path),
            "schema_path": list(error.absolute_schema_path),
            "message": error.message,
            "instance": error.instance,
        }
        raise CandidateValidationError("SCHEMA_VIOLATION", "Candidate validation failed.", details)
