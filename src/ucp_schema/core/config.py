from __future__ import annotations

"""
ucp_schema.core.config
======================

Settings shared by the bundler, composer and resolver entry points.
- Optional JSON file loading, then env overrides, then explicit overrides.
- Produces the SchemaBaseConfig used to map capability schema URLs to a
  local checkout of the schema tree.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..graph.compose import compose_from_payload
from ..graph.spec import SchemaBaseConfig
from .types import HTTP_TIMEOUT_SEC, Direction, ResolveOptions


def _load_json_file(path: Path | None) -> dict[str, Any]:
    if not path:
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"settings file {path} must contain a JSON object")
    return data


def _parse_bool_env(name: str) -> bool | None:
    val = os.getenv(name)
    if val is None or val == "":
        return None
    return val.lower() in ("1", "true", "yes", "on")


@dataclass
class SchemaSettings:
    """Schema source mapping, HTTP timeout and strictness defaults."""

    # ---- Local mirror of the published schema tree
    local_base: Path | None = None
    remote_base: str | None = None

    # ---- Remote fetching
    http_timeout_sec: float = HTTP_TIMEOUT_SEC

    # ---- Resolution defaults
    strict: bool = False

    def __post_init__(self) -> None:
        if self.local_base is not None and not isinstance(self.local_base, Path):
            self.local_base = Path(self.local_base)
        if self.remote_base and self.local_base is None:
            raise ValueError("remote_base requires local_base")
        if self.http_timeout_sec <= 0:
            raise ValueError("http_timeout_sec must be > 0")

    def schema_base(self) -> SchemaBaseConfig:
        return SchemaBaseConfig(local_base=self.local_base, remote_base=self.remote_base or None)

    def resolve_options(self, direction: Direction, operation: str) -> ResolveOptions:
        """ResolveOptions for (direction, operation) carrying this strict default."""
        return ResolveOptions(direction=direction, operation=operation, strict=self.strict)

    def compose(self, payload: Any) -> Any:
        """Compose the schema for a self-describing payload using this mapping and timeout."""
        return compose_from_payload(payload, self.schema_base(), timeout=self.http_timeout_sec)

    @classmethod
    def load(cls, path: Path | str | None = None, *, overrides: dict[str, Any] | None = None) -> SchemaSettings:
        """
        Load settings from a JSON file (if provided), then apply env and overrides.

        Env overrides:
          - UCP_SCHEMA_LOCAL_BASE
          - UCP_SCHEMA_REMOTE_BASE
          - UCP_SCHEMA_HTTP_TIMEOUT (seconds)
          - UCP_SCHEMA_STRICT (1/true/yes/on)
        """
        data: dict[str, Any] = {}
        data.update(_load_json_file(Path(path) if path else None))

        if os.getenv("UCP_SCHEMA_LOCAL_BASE"):
            data["local_base"] = os.environ["UCP_SCHEMA_LOCAL_BASE"]
        if os.getenv("UCP_SCHEMA_REMOTE_BASE"):
            data["remote_base"] = os.environ["UCP_SCHEMA_REMOTE_BASE"]
        if os.getenv("UCP_SCHEMA_HTTP_TIMEOUT"):
            data["http_timeout_sec"] = float(os.environ["UCP_SCHEMA_HTTP_TIMEOUT"])
        strict = _parse_bool_env("UCP_SCHEMA_STRICT")
        if strict is not None:
            data["strict"] = strict

        if overrides:
            data.update(overrides)

        return cls(**data)
