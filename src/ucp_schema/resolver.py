# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Annotation resolver: annotated schema -> standard JSON Schema.

For a given direction and operation every property's ``ucp_request`` /
``ucp_response`` annotation decides its fate:

    omit      drop the property, drop it from ``required``
    required  keep it, make sure it is in ``required``
    optional  keep it, drop it from ``required``
    (none)    keep it, leave ``required`` as authored

``required`` is emitted when the input had one or when the result is
non-empty. Annotation keys never reach the output. ``allOf``/``anyOf``/
``oneOf`` branches and ``$defs`` entries are transformed independently.
"""

from typing import Any

from .core.log import get_logger
from .core.types import (
    COMPOSITION_KEYWORDS,
    DEFINITION_KEYWORDS,
    UCP_ANNOTATIONS,
    Direction,
    ResolveOptions,
    Visibility,
    json_type_name,
)
from .errors import InvalidAnnotationType, UnknownVisibility
from .io.pointer import escape_pointer_token

__all__ = [
    "close_additional_properties",
    "get_visibility",
    "resolve",
    "strip_annotations",
]

log = get_logger("resolver")


# -------------------------------
# Visibility lookup
# -------------------------------


def _parse_visibility(literal: str, path: str) -> Visibility:
    vis = Visibility.parse(literal)
    if vis is None:
        raise UnknownVisibility(path, literal)
    return vis


def get_visibility(prop: Any, direction: Direction, operation: str, path: str) -> Visibility:
    """
    Visibility of one property for (direction, operation).

    ``operation`` must already be lowercase (ResolveOptions does this).
    """
    if not isinstance(prop, dict) or direction.annotation_key not in prop:
        return Visibility.INCLUDE

    annotation = prop[direction.annotation_key]
    if isinstance(annotation, str):
        return _parse_visibility(annotation, path)
    if isinstance(annotation, dict):
        if operation not in annotation:
            return Visibility.INCLUDE
        value = annotation[operation]
        if not isinstance(value, str):
            raise InvalidAnnotationType(f"{path}/{operation}", json_type_name(value))
        return _parse_visibility(value, path)
    raise InvalidAnnotationType(path, json_type_name(annotation))


# -------------------------------
# Transform
# -------------------------------


def _child(path: str, key: str | int) -> str:
    return f"{path}/{escape_pointer_token(str(key))}"


def _resolve_value(value: Any, options: ResolveOptions, path: str) -> Any:
    if isinstance(value, dict):
        return _resolve_object(value, options, path)
    if isinstance(value, list):
        return [_resolve_value(item, options, _child(path, i)) for i, item in enumerate(value)]
    return value


def _resolve_object(node: dict[str, Any], options: ResolveOptions, path: str) -> dict[str, Any]:
    authored = node.get("required")
    required: list[str] = [r for r in authored if isinstance(r, str)] if isinstance(authored, list) else []

    out: dict[str, Any] = {}
    for key, value in node.items():
        if key in UCP_ANNOTATIONS or key == "required":
            continue
        child_path = _child(path, key)

        if key == "properties":
            out[key] = _resolve_properties(value, options, child_path, required)
        elif key in DEFINITION_KEYWORDS and isinstance(value, dict):
            out[key] = {name: _resolve_value(d, options, _child(child_path, name)) for name, d in value.items()}
        elif key in COMPOSITION_KEYWORDS and isinstance(value, list):
            out[key] = [_resolve_value(b, options, _child(child_path, i)) for i, b in enumerate(value)]
        elif key == "additionalProperties" and not isinstance(value, dict):
            out[key] = value
        else:
            # items, additionalProperties schemas and any other keyword
            out[key] = _resolve_value(value, options, child_path)

    if "required" in node or required:
        out["required"] = required
    return out


def _resolve_properties(value: Any, options: ResolveOptions, path: str, required: list[str]) -> Any:
    if not isinstance(value, dict):
        return value

    out: dict[str, Any] = {}
    for name, prop in value.items():
        prop_path = _child(path, name)
        vis = get_visibility(prop, options.direction, options.operation, prop_path)

        if vis is Visibility.OMIT:
            required[:] = [r for r in required if r != name]
            continue

        out[name] = strip_annotations(_resolve_value(prop, options, prop_path))
        if vis is Visibility.REQUIRED:
            if name not in required:
                required.append(name)
        elif vis is Visibility.OPTIONAL:
            required[:] = [r for r in required if r != name]
    return out


def strip_annotations(schema: Any) -> Any:
    """Copy of ``schema`` with every ``ucp_request``/``ucp_response`` key removed at any depth."""
    if isinstance(schema, dict):
        return {k: strip_annotations(v) for k, v in schema.items() if k not in UCP_ANNOTATIONS}
    if isinstance(schema, list):
        return [strip_annotations(item) for item in schema]
    return schema


# -------------------------------
# Strict mode
# -------------------------------


def _is_object_schema(node: dict[str, Any]) -> bool:
    return node.get("type") == "object" or "properties" in node


def close_additional_properties(schema: Any) -> Any:
    """
    Copy of ``schema`` where every object schema rejects unknown fields.

    Missing or ``true`` additionalProperties becomes ``false``; ``false`` and
    schema-valued additionalProperties are kept as authored. ``required`` is
    never touched.
    """
    if not isinstance(schema, dict):
        return schema

    out = dict(schema)
    if _is_object_schema(out) and not isinstance(out.get("additionalProperties"), dict):
        out["additionalProperties"] = False

    for key, child in schema.items():
        if key == "properties" and isinstance(child, dict):
            out[key] = {name: close_additional_properties(p) for name, p in child.items()}
        elif key in ("items", "additionalProperties") and isinstance(child, dict):
            out[key] = close_additional_properties(child)
        elif key in DEFINITION_KEYWORDS and isinstance(child, dict):
            out[key] = {name: close_additional_properties(d) for name, d in child.items()}
        elif key in COMPOSITION_KEYWORDS and isinstance(child, list):
            out[key] = [close_additional_properties(b) for b in child]
    return out


# -------------------------------
# Public API
# -------------------------------


def resolve(schema: Any, options: ResolveOptions) -> Any:
    """
    Resolve ``schema`` for ``options.direction`` / ``options.operation``.

    Returns a new schema without annotations; with ``options.strict`` every
    object schema is closed afterwards. Raises InvalidAnnotationType or
    UnknownVisibility naming the JSON-pointer path of the offending field.
    """
    resolved = _resolve_value(schema, options, "")
    if options.strict:
        resolved = close_additional_properties(resolved)
    log.debug(
        "resolve.done",
        event="resolve.done",
        direction=options.direction.value,
        operation=options.operation,
        strict=options.strict,
    )
    return resolved
