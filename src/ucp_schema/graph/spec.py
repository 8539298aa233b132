# src/ucp_schema/graph/spec.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from ..errors import EmptyCapabilities, InvalidCapability

# -------------------------------
# Self-description shapes
# -------------------------------


class DetectedDirection(str, Enum):
    """Payload shape: inline ``ucp.capabilities`` (response) or ``ucp.meta.profile`` (request)."""

    RESPONSE = "response"
    REQUEST = "request"


@dataclass(frozen=True)
class SchemaBaseConfig:
    """
    Mapping of capability schema URLs to a local schema tree.

    With both set, URLs under ``remote_base`` have that prefix stripped and
    the remainder joined to ``local_base``:
        remote_base = "https://ucp.dev/draft", local_base = "source"
        https://ucp.dev/draft/schemas/checkout.json -> source/schemas/checkout.json
    """

    local_base: Path | None = None
    remote_base: str | None = None


class Capability(BaseModel):
    """One declared capability (first negotiated version entry)."""

    name: str
    version: str
    schema_url: str
    extends: list[str] | None = None
    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("extends", mode="before")
    @classmethod
    def _normalize_extends(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        if v is None or isinstance(v, list):
            return v
        raise ValueError("extends must be string or array of strings")

    @property
    def is_root(self) -> bool:
        return self.extends is None


# -------------------------------
# Detection / parsing
# -------------------------------


def ucp_metadata(payload: Any) -> dict[str, Any] | None:
    if not isinstance(payload, dict):
        return None
    ucp = payload.get("ucp")
    return ucp if isinstance(ucp, dict) else None


def detect_direction(payload: Any) -> DetectedDirection | None:
    """
    RESPONSE if the payload carries an object at ``ucp.capabilities``,
    REQUEST if it carries a string at ``ucp.meta.profile``, else None.
    """
    ucp = ucp_metadata(payload)
    if ucp is None:
        return None
    if isinstance(ucp.get("capabilities"), dict):
        return DetectedDirection.RESPONSE
    meta = ucp.get("meta")
    if isinstance(meta, dict) and isinstance(meta.get("profile"), str):
        return DetectedDirection.REQUEST
    return None


def profile_url(payload: Any) -> str | None:
    ucp = ucp_metadata(payload) or {}
    meta = ucp.get("meta")
    if isinstance(meta, dict) and isinstance(meta.get("profile"), str):
        return meta["profile"]
    return None


def _entry_str(name: str, entry: dict[str, Any], key: str) -> str:
    val = entry.get(key)
    if not isinstance(val, str):
        raise InvalidCapability(name, f"missing {key} field")
    return val


def parse_capabilities(caps: Any) -> list[Capability]:
    """
    Parse a ``ucp.capabilities`` mapping (name -> list of version entries).

    The first entry of each list is used; version negotiation has already
    happened upstream. Declaration order is preserved.
    """
    if not isinstance(caps, dict) or not caps:
        raise EmptyCapabilities()

    out: list[Capability] = []
    for name, entries in caps.items():
        if not isinstance(entries, list):
            raise InvalidCapability(name, "expected array of capability entries")
        if not entries:
            raise InvalidCapability(name, "empty capability array")
        entry = entries[0]
        if not isinstance(entry, dict):
            raise InvalidCapability(name, "capability entry must be an object")

        version = _entry_str(name, entry, "version")
        schema_url = _entry_str(name, entry, "schema")
        extends = entry.get("extends")
        if isinstance(extends, list) and not all(isinstance(p, str) for p in extends):
            raise InvalidCapability(name, "extends array must contain strings")
        try:
            out.append(Capability(name=name, version=version, schema_url=schema_url, extends=extends))
        except ValidationError as ex:
            raise InvalidCapability(name, "extends must be string or array of strings") from ex
    return out
