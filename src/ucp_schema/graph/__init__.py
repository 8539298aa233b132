# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Public exports for the capability graph package.

Callers normally need only compose_from_payload; the lower layers are
exported for tooling that inspects declared capabilities.
"""

from .compiler import CapabilityGraph, compile_capability_graph, reaches_root
from .compose import compose_from_payload, compose_schema, extract_capabilities, resolve_schema_url
from .spec import Capability, DetectedDirection, SchemaBaseConfig, detect_direction, parse_capabilities

__all__ = [
    "Capability",
    "CapabilityGraph",
    "DetectedDirection",
    "SchemaBaseConfig",
    "compile_capability_graph",
    "compose_from_payload",
    "compose_schema",
    "detect_direction",
    "extract_capabilities",
    "parse_capabilities",
    "reaches_root",
    "resolve_schema_url",
]
