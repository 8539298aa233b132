# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Error taxonomy for schema loading, bundling, composition, resolution and
validation.

Every class carries an ``exit_code`` so a command-line wrapper can map a
failure without inspecting messages:
    1 - payload failed conformance validation
    2 - parse / annotation / composition logic error
    3 - I/O or network failure
"""

from dataclasses import dataclass
from pathlib import Path


class UcpSchemaError(Exception):
    """Base class for all ucp_schema errors."""

    exit_code: int = 2


# ---------------------------------------------------------------------------
# Resolution (loading, bundling, annotations)
# ---------------------------------------------------------------------------


class ResolveError(UcpSchemaError):
    """Failure while loading, bundling or resolving a schema."""

    ...


class FileNotFound(ResolveError):
    exit_code = 3

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"file not found: {self.path}")


class ReadError(ResolveError):
    exit_code = 3

    def __init__(self, path: Path | str, cause: BaseException) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"cannot read {self.path}: {cause}")


class NetworkError(ResolveError):
    exit_code = 3

    def __init__(self, url: str, cause: BaseException | str) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"failed to fetch {url}: {cause}")


class InvalidJson(ResolveError):
    """Malformed JSON; keeps the decoder's position when available."""

    def __init__(self, message: str, *, line: int | None = None, column: int | None = None) -> None:
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"invalid JSON: {message}")


class InvalidAnnotationType(ResolveError):
    def __init__(self, path: str, actual: str) -> None:
        self.path = path
        self.actual = actual
        super().__init__(f"invalid annotation at {path}: expected string or object, got {actual}")


class UnknownVisibility(ResolveError):
    def __init__(self, path: str, value: str) -> None:
        self.path = path
        self.value = value
        super().__init__(f'unknown visibility "{value}" at {path}: expected omit, required, or optional')


class InvalidSchema(ResolveError):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"invalid schema: {message}")


class BundleError(ResolveError):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"failed to bundle schema: {message}")


class FragmentNotFound(BundleError):
    def __init__(self, fragment: str, source: str | None = None) -> None:
        self.fragment = fragment
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"fragment not found{where}: {fragment}")


class CircularReference(BundleError):
    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"circular reference detected: {ref}")


# ---------------------------------------------------------------------------
# Composition from capability metadata
# ---------------------------------------------------------------------------


class ComposeError(UcpSchemaError):
    """Failure while composing a schema from payload capability metadata."""

    ...


class NotSelfDescribing(ComposeError):
    def __init__(self) -> None:
        super().__init__("payload is not self-describing: missing ucp.capabilities and ucp.meta.profile")


class EmptyCapabilities(ComposeError):
    def __init__(self) -> None:
        super().__init__("no capabilities declared in ucp.capabilities")


class NoRootCapability(ComposeError):
    def __init__(self) -> None:
        super().__init__("no root capability found (all capabilities have 'extends')")


class MultipleRootCapabilities(ComposeError):
    def __init__(self, names: list[str]) -> None:
        self.names = list(names)
        super().__init__(f"multiple root capabilities found: {', '.join(self.names)}")


class UnknownParent(ComposeError):
    def __init__(self, extension: str, parent: str) -> None:
        self.extension = extension
        self.parent = parent
        super().__init__(f"extension '{extension}' references unknown parent '{parent}'")


class OrphanExtension(ComposeError):
    def __init__(self, extension: str, root: str) -> None:
        self.extension = extension
        self.root = root
        super().__init__(f"extension '{extension}' does not connect to root '{root}'")


class MissingDefEntry(ComposeError):
    def __init__(self, extension: str, expected_key: str) -> None:
        self.extension = extension
        self.expected_key = expected_key
        super().__init__(f"extension '{extension}' missing $defs entry for '{expected_key}'")


class InvalidCapability(ComposeError):
    def __init__(self, name: str, message: str) -> None:
        self.name = name
        self.message = message
        super().__init__(f"invalid capability '{name}': {message}")


class InvalidUrl(ComposeError):
    def __init__(self, url: str, message: str) -> None:
        self.url = url
        self.message = message
        super().__init__(f"invalid URL '{url}': {message}")


class SchemaFetch(ComposeError):
    exit_code = 3

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        self.message = message
        super().__init__(f"failed to fetch schema from {url}: {message}")


class ProfileFetch(ComposeError):
    exit_code = 3

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        self.message = message
        super().__init__(f"failed to fetch profile from {url}: {message}")


# ---------------------------------------------------------------------------
# Conformance validation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SchemaError:
    """One conformance failure: JSON Pointer (RFC 6901) into the payload plus a message."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class ValidationFailed(UcpSchemaError):
    """The payload does not conform to the resolved schema."""

    exit_code = 1

    def __init__(self, errors: list[SchemaError]) -> None:
        self.errors = list(errors)
        super().__init__(f"validation failed with {len(self.errors)} error(s)")


def exit_code_for(exc: BaseException) -> int:
    """Process exit code for an exception raised by this package (unknown errors map to 2)."""
    if isinstance(exc, UcpSchemaError):
        return exc.exit_code
    return 2


__all__ = [
    "BundleError",
    "CircularReference",
    "ComposeError",
    "EmptyCapabilities",
    "FileNotFound",
    "FragmentNotFound",
    "InvalidAnnotationType",
    "InvalidCapability",
    "InvalidJson",
    "InvalidSchema",
    "InvalidUrl",
    "MissingDefEntry",
    "MultipleRootCapabilities",
    "NetworkError",
    "NoRootCapability",
    "NotSelfDescribing",
    "OrphanExtension",
    "ProfileFetch",
    "ReadError",
    "ResolveError",
    "SchemaError",
    "SchemaFetch",
    "UcpSchemaError",
    "UnknownParent",
    "UnknownVisibility",
    "ValidationFailed",
    "exit_code_for",
]
