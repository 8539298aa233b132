from __future__ import annotations

"""
ucp_schema.core.types
=====================

Shared type aliases, read-only constants and the small value types that
every stage (bundler, composer, resolver) passes around.

Guidelines:
- Constants here are static tables; never mutate them at runtime.
- Avoid importing application-level modules here.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Final, Union

from pydantic import BaseModel, field_validator

# ---- JSON-like value aliases -------------------------------------------------

JSONScalar = Union[str, int, float, bool, None]
JSONValue = Union[JSONScalar, "JSONArray", "JSONDict"]
JSONArray = list[JSONValue]
JSONDict = dict[str, JSONValue]

# Paths
StrPath = Union[str, os.PathLike[str], Path]

# ---- Constants ---------------------------------------------------------------

# Annotation keys stripped from every resolved schema.
UCP_ANNOTATIONS: Final[tuple[str, ...]] = ("ucp_request", "ucp_response")

# Operation names recognised in the object form of an annotation.
VALID_OPERATIONS: Final[tuple[str, ...]] = ("create", "update", "complete", "read")

COMPOSITION_KEYWORDS: Final[tuple[str, ...]] = ("allOf", "anyOf", "oneOf")
DEFINITION_KEYWORDS: Final[tuple[str, ...]] = ("$defs", "definitions")

# Per-request timeout for remote documents (seconds).
HTTP_TIMEOUT_SEC: Final[float] = 10.0


def json_type_name(value: Any) -> str:
    """JSON type name of a parsed value, for error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


# ---- Direction / visibility --------------------------------------------------


class Direction(str, Enum):
    """Which side of the exchange a schema is resolved for."""

    REQUEST = "request"
    RESPONSE = "response"

    @property
    def annotation_key(self) -> str:
        return "ucp_request" if self is Direction.REQUEST else "ucp_response"



class Visibility(str, Enum):
    """
    Effect of an annotation on one property.

    INCLUDE is the implicit default (no annotation, or no entry for the
    operation) and is never accepted as a literal.
    """

    INCLUDE = "include"
    OMIT = "omit"
    REQUIRED = "required"
    OPTIONAL = "optional"

    @classmethod
    def parse(cls, literal: str) -> Visibility | None:
        if literal in ("omit", "required", "optional"):
            return cls(literal)
        return None


class ResolveOptions(BaseModel):
    """Direction/operation pair a schema is resolved for. Operation is case-insensitive."""

    direction: Direction
    operation: str
    strict: bool = False
    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("operation")
    @classmethod
    def _lowercase(cls, v: str) -> str:
        return v.lower()


__all__ = [
    # JSON aliases
    "JSONScalar",
    "JSONValue",
    "JSONArray",
    "JSONDict",
    "StrPath",
    # constants
    "UCP_ANNOTATIONS",
    "VALID_OPERATIONS",
    "COMPOSITION_KEYWORDS",
    "DEFINITION_KEYWORDS",
    "HTTP_TIMEOUT_SEC",
    # value types
    "Direction",
    "Visibility",
    "ResolveOptions",
    "json_type_name",
]
