# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Static checks for annotated schema files.

Codes:
    E001  file cannot be loaded (syntax / read error)
    E002  $ref points at a file that does not exist
    E003  $ref anchor does not resolve
    E004  unknown visibility literal
    E005  annotation value has the wrong type
    W002  schema has no $id
    W003  unknown operation name in an object-form annotation
"""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from .core.log import get_logger
from .core.types import UCP_ANNOTATIONS, VALID_OPERATIONS, StrPath, Visibility, json_type_name
from .errors import FragmentNotFound, ResolveError
from .io.loader import is_url, load_schema
from .io.pointer import escape_pointer_token, navigate_fragment, split_ref

__all__ = [
    "Diagnostic",
    "FileResult",
    "FileStatus",
    "LintResult",
    "Severity",
    "lint",
    "lint_file",
]

log = get_logger("linter")


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class FileStatus(str, Enum):
    OK = "ok"
    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    severity: Severity
    code: str
    file: Path
    path: str  # JSON pointer inside the file, "/" for the document itself
    message: str


class FileResult(BaseModel):
    file: Path
    status: FileStatus
    diagnostics: list[Diagnostic] = Field(default_factory=list)


class LintResult(BaseModel):
    path: Path
    files_checked: int = 0
    passed: int = 0
    failed: int = 0
    errors: int = 0
    warnings: int = 0
    results: list[FileResult] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.errors == 0


# -------------------------------
# Checks
# -------------------------------


class _FileLinter:
    def __init__(self, file: Path) -> None:
        self.file = file
        self.file_dir = file.parent
        self.diagnostics: list[Diagnostic] = []

    def add(self, severity: Severity, code: str, path: str, message: str) -> None:
        self.diagnostics.append(Diagnostic(severity=severity, code=code, file=self.file, path=path, message=message))

    def walk(self, value: Any, path: str, root: Any) -> None:
        if isinstance(value, dict):
            ref = value.get("$ref")
            if isinstance(ref, str):
                self.check_ref(ref, path, root)
            for key in UCP_ANNOTATIONS:
                if key in value:
                    self.check_annotation(value[key], key, path)
            for key, child in value.items():
                self.walk(child, f"{path}/{escape_pointer_token(key)}", root)
        elif isinstance(value, list):
            for i, item in enumerate(value):
                self.walk(item, f"{path}/{i}", root)

    def check_ref(self, ref: str, path: str, root: Any) -> None:
        # remote refs cannot be checked offline
        if is_url(ref):
            return
        if ref.startswith("#"):
            if ref != "#" and not _resolves(root, ref):
                self.add(Severity.ERROR, "E003", path, f"anchor not found: {ref}")
            return

        file_part, fragment = split_ref(ref)
        ref_path = self.file_dir / file_part
        if not ref_path.exists():
            self.add(Severity.ERROR, "E002", path, f"file not found: {file_part}")
            return
        if fragment and fragment != "#":
            try:
                target = load_schema(ref_path)
            except ResolveError:
                # reported when the referenced file itself is linted
                return
            if not _resolves(target, fragment):
                self.add(Severity.ERROR, "E003", path, f"anchor not found in {file_part}: {fragment}")

    def check_annotation(self, annotation: Any, key: str, path: str) -> None:
        ann_path = f"{path}/{key}"
        if isinstance(annotation, str):
            if Visibility.parse(annotation) is None:
                self.add(
                    Severity.ERROR,
                    "E004",
                    ann_path,
                    f'invalid {key} value "{annotation}": expected omit, required, or optional',
                )
            return
        if not isinstance(annotation, dict):
            self.add(
                Severity.ERROR,
                "E005",
                ann_path,
                f"invalid {key} type: expected string or object, got {json_type_name(annotation)}",
            )
            return

        for op, val in annotation.items():
            op_path = f"{ann_path}/{escape_pointer_token(op)}"
            if op not in VALID_OPERATIONS:
                self.add(
                    Severity.WARNING,
                    "W003",
                    op_path,
                    f'unknown operation "{op}": expected {", ".join(VALID_OPERATIONS)}',
                )
            if not isinstance(val, str):
                self.add(
                    Severity.ERROR,
                    "E005",
                    op_path,
                    f"invalid {key} value type: expected string, got {json_type_name(val)}",
                )
            elif Visibility.parse(val) is None:
                self.add(
                    Severity.ERROR,
                    "E004",
                    op_path,
                    f'invalid {key} value "{val}": expected omit, required, or optional',
                )


def _resolves(root: Any, fragment: str) -> bool:
    try:
        navigate_fragment(root, fragment)
    except FragmentNotFound:
        return False
    return True


def _status(diagnostics: list[Diagnostic]) -> FileStatus:
    if any(d.severity is Severity.ERROR for d in diagnostics):
        return FileStatus.ERROR
    if diagnostics:
        return FileStatus.WARNING
    return FileStatus.OK


def _relative(file: Path, base_path: Path) -> Path:
    try:
        return file.relative_to(base_path)
    except ValueError:
        return file


# -------------------------------
# Public API
# -------------------------------


def lint_file(file: StrPath, base_path: StrPath | None = None) -> FileResult:
    """Lint one schema file; the reported file name is relative to ``base_path`` when possible."""
    file = Path(file)
    base = Path(base_path) if base_path is not None else file.parent
    linter = _FileLinter(file)

    try:
        schema = load_schema(file)
    except ResolveError as e:
        linter.add(Severity.ERROR, "E001", "/", f"syntax error: {e}")
        return FileResult(file=_relative(file, base), status=FileStatus.ERROR, diagnostics=linter.diagnostics)

    linter.walk(schema, "", schema)
    if not isinstance(schema, dict) or "$id" not in schema:
        linter.add(Severity.WARNING, "W002", "/", "schema missing $id field")

    return FileResult(file=_relative(file, base), status=_status(linter.diagnostics), diagnostics=linter.diagnostics)


def _collect_schema_files(path: Path) -> list[Path]:
    if path.is_file():
        return [path] if path.suffix == ".json" else []
    return sorted(p for p in path.rglob("*.json") if p.is_file())


def lint(path: StrPath, strict: bool = False) -> LintResult:
    """
    Lint a ``.json`` file or every ``.json`` file below a directory.
    With ``strict`` a file with warnings counts as failed.
    """
    root = Path(path)
    files = _collect_schema_files(root)
    base = root if root.is_dir() else root.parent
    results = [lint_file(f, base) for f in files]

    errors = sum(1 for r in results for d in r.diagnostics if d.severity is Severity.ERROR)
    warnings = sum(1 for r in results for d in r.diagnostics if d.severity is Severity.WARNING)
    if strict:
        failed = sum(1 for r in results if r.status is not FileStatus.OK)
    else:
        failed = sum(1 for r in results if r.status is FileStatus.ERROR)

    log.info("lint.done", event="lint.done", path=str(root), files=len(files), errors=errors, warnings=warnings)
    return LintResult(
        path=root,
        files_checked=len(files),
        passed=len(files) - failed,
        failed=failed,
        errors=errors,
        warnings=warnings,
        results=results,
    )
