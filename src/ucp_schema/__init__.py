from __future__ import annotations

# Runtime package version, provided by setuptools_scm during build.
try:
    # created at build time by setuptools_scm (see [tool.setuptools_scm].version_file)
    from ._version import __version__
except Exception:  # pragma: no cover
    # fallback for editable installs / missing file
    try:
        from importlib.metadata import version as _pkg_version

        __version__ = _pkg_version("ucp-schema")
    except Exception:
        __version__ = "0.0.0"

from .core.config import SchemaSettings
from .core.types import Direction, ResolveOptions, Visibility
from .errors import (
    BundleError,
    CircularReference,
    ComposeError,
    FileNotFound,
    FragmentNotFound,
    InvalidAnnotationType,
    InvalidJson,
    NetworkError,
    ResolveError,
    SchemaError,
    UcpSchemaError,
    UnknownVisibility,
    ValidationFailed,
    exit_code_for,
)
from .graph import (
    Capability,
    DetectedDirection,
    SchemaBaseConfig,
    compose_from_payload,
    compose_schema,
    detect_direction,
    extract_capabilities,
)
from .io import (
    bundle_refs,
    bundle_refs_with_url_mapping,
    is_url,
    load_schema,
    load_schema_auto,
    load_schema_str,
    load_schema_url,
    navigate_fragment,
)
from .linter import lint, lint_file
from .resolver import get_visibility, resolve, strip_annotations
from .validator import validate, validate_against_schema

__all__ = [
    # resolution
    "Direction",
    "ResolveOptions",
    "Visibility",
    "get_visibility",
    "resolve",
    "strip_annotations",
    # loading / bundling
    "bundle_refs",
    "bundle_refs_with_url_mapping",
    "is_url",
    "load_schema",
    "load_schema_auto",
    "load_schema_str",
    "load_schema_url",
    "navigate_fragment",
    # composition
    "Capability",
    "DetectedDirection",
    "SchemaBaseConfig",
    "compose_from_payload",
    "compose_schema",
    "detect_direction",
    "extract_capabilities",
    # validation / lint
    "lint",
    "lint_file",
    "validate",
    "validate_against_schema",
    # config
    "SchemaSettings",
    # errors
    "BundleError",
    "CircularReference",
    "ComposeError",
    "FileNotFound",
    "FragmentNotFound",
    "InvalidAnnotationType",
    "InvalidJson",
    "NetworkError",
    "ResolveError",
    "SchemaError",
    "UcpSchemaError",
    "UnknownVisibility",
    "ValidationFailed",
    "exit_code_for",
    "__version__",
]
