from __future__ import annotations

from functools import lru_cache
from importlib import resources
import json
from typing import Any

from jsonschema import Draft202012Validator

SCHEMA_FILES = {
    "class": "schemas/tc-class.schema.json",
    "qdisc": "schemas/tc-qdisc.schema.json",
}


def load_schema(kind: str) -> dict[str, Any]:
    schema_path = resources.files("tc_exporter").joinpath(SCHEMA_FILES[kind])
    return json.loads(schema_path.read_text(encoding="utf-8"))


@lru_cache(maxsize=None)
def get_validator(kind: str) -> Draft202012Validator:
    return Draft202012Validator(schema=load_schema(kind))


def validate_records(kind: str, data: Any) -> list[str]:
    """Return the schema violations of decoded ``tc`` output, empty if valid."""
    validator = get_validator(kind)
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(part) for part in e.path])
    return [
        f"{'/'.join(str(part) for part in error.path) or '<root>'}: {error.message}"
        for error in errors
    ]
