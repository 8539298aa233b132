# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Payload conformance checks against resolved schemas.

Conformance itself is delegated to the ``jsonschema`` package; this module
only resolves annotations first and turns validator output into
SchemaError records.
"""

from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError as JsonSchemaDefinitionError
from jsonschema.validators import validator_for

from .core.log import get_logger
from .core.types import ResolveOptions
from .errors import InvalidSchema, SchemaError, ValidationFailed
from .io.pointer import escape_pointer_token
from .resolver import resolve

__all__ = ["validate", "validate_against_schema"]

log = get_logger("validator")


def _pointer(parts) -> str:
    return "".join(f"/{escape_pointer_token(str(p))}" for p in parts)


def validate_against_schema(schema: Any, payload: Any) -> None:
    """
    Check ``payload`` against an already-resolved ``schema``.

    Raises:
        InvalidSchema if the schema itself is not a valid JSON Schema,
        ValidationFailed carrying every failure (sorted by path).
    """
    cls = validator_for(schema, default=Draft202012Validator)
    try:
        cls.check_schema(schema)
    except JsonSchemaDefinitionError as e:
        raise InvalidSchema(e.message) from e

    validator = cls(schema)
    errors = [SchemaError(path=_pointer(e.absolute_path), message=e.message) for e in validator.iter_errors(payload)]
    if errors:
        errors.sort(key=lambda e: e.path)
        log.debug("validate.failed", event="validate.failed", n=len(errors))
        raise ValidationFailed(errors)


def validate(schema: Any, payload: Any, options: ResolveOptions) -> None:
    """Resolve ``schema`` for ``options`` and check ``payload`` against the result."""
    validate_against_schema(resolve(schema, options), payload)
