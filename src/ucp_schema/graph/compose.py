# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Schema composition from self-describing payload metadata.

Response payloads embed ``ucp.capabilities`` inline; request payloads point
at a profile document via ``ucp.meta.profile``. Either way the declared
capabilities form a graph with a single root. Each extension's schema
contributes ``$defs[<root name>]``; those fragments are combined under
``allOf``. A root-only declaration yields the root schema itself.

All documents are loaded sequentially; any load/bundle failure aborts the
whole composition.
"""

from collections.abc import Sequence
from copy import deepcopy
from pathlib import Path
from typing import Any

from ..core.log import get_logger, log_context
from ..core.types import HTTP_TIMEOUT_SEC
from ..errors import (
    InvalidUrl,
    MissingDefEntry,
    NotSelfDescribing,
    ProfileFetch,
    ResolveError,
    SchemaFetch,
)
from ..io.bundler import bundle_refs, bundle_refs_with_url_mapping
from ..io.loader import is_url, load_schema, load_schema_url
from .compiler import compile_capability_graph
from .spec import Capability, SchemaBaseConfig, parse_capabilities, profile_url, ucp_metadata

__all__ = [
    "compose_from_payload",
    "compose_schema",
    "extract_capabilities",
    "extract_url_path",
    "inline_internal_refs",
    "resolve_schema_url",
]

log = get_logger("compose")

_DEFS_PREFIX = "#/$defs/"


# -------------------------------
# Schema URL resolution
# -------------------------------


def extract_url_path(url: str) -> str:
    """
    Path portion of a URL ("https://ucp.dev/schemas/a.json" -> "/schemas/a.json").
    Non-URLs are returned unchanged.
    """
    for scheme in ("https://", "http://"):
        if url.startswith(scheme):
            after = url[len(scheme) :]
            idx = after.find("/")
            if idx < 0:
                raise InvalidUrl(url, "could not extract path from URL")
            return after[idx:]
    return url


def _local_path_for(url: str, local_base: Path, remote_base: str | None) -> Path:
    if remote_base and url.startswith(remote_base):
        rel = url[len(remote_base) :]
    else:
        rel = extract_url_path(url)
    return local_base / rel.lstrip("/")


def resolve_schema_url(url: str, base: SchemaBaseConfig, *, timeout: float = HTTP_TIMEOUT_SEC) -> Any:
    """
    Load the schema behind ``url`` and bundle its external $refs.

    - local_base set: map the URL into the local tree, load, bundle (URL-aware
      when remote_base is set as well);
    - otherwise an http(s) URL is fetched as-is (no bundling);
    - anything else is a local path bundled relative to its directory.
    """
    if base.local_base is not None:
        local_path = _local_path_for(url, base.local_base, base.remote_base)
        try:
            schema = load_schema(local_path)
        except ResolveError as e:
            raise SchemaFetch(url, f"{e} (mapped to {local_path})") from e
        try:
            if base.remote_base:
                return bundle_refs_with_url_mapping(schema, local_path.parent, base.local_base, base.remote_base)
            return bundle_refs(schema, local_path.parent)
        except ResolveError as e:
            raise SchemaFetch(url, f"bundling refs: {e}") from e

    if is_url(url):
        try:
            return load_schema_url(url, timeout=timeout)
        except ResolveError as e:
            raise SchemaFetch(url, str(e)) from e

    local_path = Path(url)
    try:
        schema = load_schema(local_path)
    except ResolveError as e:
        raise SchemaFetch(url, str(e)) from e
    try:
        return bundle_refs(schema, local_path.parent)
    except ResolveError as e:
        raise SchemaFetch(url, f"bundling refs: {e}") from e


# -------------------------------
# Capability extraction
# -------------------------------


def extract_capabilities(
    payload: Any, base: SchemaBaseConfig, *, timeout: float = HTTP_TIMEOUT_SEC
) -> list[Capability]:
    """
    Capabilities declared by a payload.

    Response pattern (an object at ``ucp.capabilities``) is read directly; request pattern
    fetches the ``ucp.meta.profile`` document and reads its capabilities.
    """
    ucp = ucp_metadata(payload)
    if ucp is None:
        raise NotSelfDescribing()

    caps = ucp.get("capabilities")
    if isinstance(caps, dict):
        return parse_capabilities(caps)

    url = profile_url(payload)
    if url is None:
        raise NotSelfDescribing()

    try:
        profile = resolve_schema_url(url, base, timeout=timeout)
    except SchemaFetch as e:
        raise ProfileFetch(url, e.message) from e
    except InvalidUrl as e:
        raise ProfileFetch(url, str(e)) from e

    caps = (ucp_metadata(profile) or {}).get("capabilities")
    if caps is None:
        raise ProfileFetch(url, "profile missing ucp.capabilities")
    log.debug("compose.profile", event="compose.profile", profile=url, n=len(caps) if isinstance(caps, dict) else 0)
    return parse_capabilities(caps)


# -------------------------------
# Internal $defs inlining
# -------------------------------


def _inline_defs(value: Any, defs: dict[str, Any], active: set[str]) -> Any:
    if isinstance(value, dict):
        ref = value.get("$ref")
        if isinstance(ref, str) and ref.startswith(_DEFS_PREFIX):
            name = ref[len(_DEFS_PREFIX) :].replace("~1", "/").replace("~0", "~")
            if name in active:
                # already being inlined further up; keep the ref
                return deepcopy(value)
            if name in defs:
                active.add(name)
                try:
                    target = _inline_defs(deepcopy(defs[name]), defs, active)
                finally:
                    active.discard(name)
                out = {k: _inline_defs(v, defs, active) for k, v in value.items() if k != "$ref"}
                if isinstance(target, dict):
                    for k, v in target.items():
                        out.setdefault(k, v)
                return out
        return {k: _inline_defs(v, defs, active) for k, v in value.items()}
    if isinstance(value, list):
        return [_inline_defs(item, defs, active) for item in value]
    return value


def inline_internal_refs(value: Any, defs: dict[str, Any]) -> Any:
    """
    Return a copy of ``value`` with ``#/$defs/<name>`` refs replaced by the
    matching entry of ``defs``, so a definition lifted out of its document
    stays self-contained. Unknown names and ``#`` are left as they are.
    """
    return _inline_defs(deepcopy(value), defs, set())


# -------------------------------
# Composition
# -------------------------------


def _extension_fragment(ext: Capability, root_name: str, base: SchemaBaseConfig, timeout: float) -> Any:
    schema = resolve_schema_url(ext.schema_url, base, timeout=timeout)
    defs = schema.get("$defs") if isinstance(schema, dict) else None
    if not isinstance(defs, dict) or root_name not in defs:
        raise MissingDefEntry(ext.name, root_name)
    return inline_internal_refs(defs[root_name], defs)


def compose_schema(
    capabilities: Sequence[Capability], base: SchemaBaseConfig, *, timeout: float = HTTP_TIMEOUT_SEC
) -> Any:
    """
    Validate the capability graph and build the composed schema.

    Root only -> the bundled root schema. Otherwise every extension
    (intermediate ones included) contributes its ``$defs[<root name>]``
    fragment and the result is ``{"allOf": [...]}`` in declaration order.
    """
    graph = compile_capability_graph(capabilities)
    root = graph.root

    if graph.is_root_only:
        log.debug("compose.root_only", event="compose.root_only", capability=root.name)
        return resolve_schema_url(root.schema_url, base, timeout=timeout)

    fragments: list[Any] = []
    for ext in graph.extensions:
        with log_context(capability=ext.name):
            fragments.append(_extension_fragment(ext, root.name, base, timeout))
            log.debug("compose.extension", event="compose.extension", root=root.name, schema=ext.schema_url)

    log.info("compose.done", event="compose.done", root=root.name, n_extensions=len(fragments))
    return {"allOf": fragments}


def compose_from_payload(payload: Any, base: SchemaBaseConfig, *, timeout: float = HTTP_TIMEOUT_SEC) -> Any:
    """Extract capabilities from ``payload`` and compose their schema in one call."""
    capabilities = extract_capabilities(payload, base, timeout=timeout)
    return compose_schema(capabilities, base, timeout=timeout)
