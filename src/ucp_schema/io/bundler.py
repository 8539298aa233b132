# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Bundler: inline external $ref pointers into a self-contained document.

Rules, applied depth-first over the whole tree:
- "$ref": "#" is never touched (recursive self-reference).
- "$ref": "#/..." is resolved only inside an externally loaded document, and
  against that document's own root. In the top-level document it is left
  for the conformance validator.
- anything else is a file path or URL (optionally with "#fragment"); it is
  loaded, navigated, bundled recursively and merged into the referencing
  object. Keys already present next to the $ref win over inlined keys.

Cycle detection keys on (canonical file, fragment) and is scoped to the
current resolution stack, so the same target may be shared from different
branches but may not contain itself.
"""

from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..core.log import get_logger
from ..core.types import StrPath
from ..errors import CircularReference
from .loader import load_schema
from .pointer import navigate_fragment, split_ref

__all__ = [
    "bundle_refs",
    "bundle_refs_with_url_mapping",
    "resolve_ref_to_path",
]

log = get_logger("bundler")


def resolve_ref_to_path(
    ref: str,
    base_dir: StrPath,
    local_base: StrPath | None = None,
    remote_base: str | None = None,
) -> Path:
    """
    Map the file/URL part of a $ref to a local path.

    With URL mapping configured and ``ref`` under ``remote_base``, the prefix
    is stripped and the remainder joined to ``local_base``. Otherwise the ref
    is taken relative to ``base_dir``.
    """
    if local_base is not None and remote_base and ref.startswith(remote_base):
        remainder = ref[len(remote_base) :]
        return Path(local_base) / remainder.lstrip("/")
    return Path(base_dir) / ref


def _canonical(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path


@dataclass
class _FileFrame:
    """An externally loaded document: internal refs below it resolve against ``root``."""

    path: Path
    root: Any


@dataclass
class _Bundler:
    local_base: Path | None = None
    remote_base: str | None = None
    # keys currently on the resolution stack, not every key ever seen
    active: set[str] = field(default_factory=set)

    def bundle(self, value: Any, base_dir: Path, frame: _FileFrame | None, depth: int = 0) -> Any:
        if isinstance(value, dict):
            ref = value.get("$ref")
            if isinstance(ref, str):
                if ref.startswith("#"):
                    if ref != "#" and frame is not None:
                        return self._inline_internal(value, ref, base_dir, frame, depth)
                else:
                    return self._inline_external(value, ref, base_dir, frame, depth)
            return {k: self.bundle(v, base_dir, frame, depth) for k, v in value.items()}
        if isinstance(value, list):
            return [self.bundle(item, base_dir, frame, depth) for item in value]
        return value

    # ---- $ref kinds ---------------------------------------------------------

    def _inline_internal(self, node: dict[str, Any], ref: str, base_dir: Path, frame: _FileFrame, depth: int) -> Any:
        key = f"{frame.path}|{ref}"
        if key in self.active:
            raise CircularReference(ref)
        target = navigate_fragment(frame.root, ref, source=str(frame.path))
        self.active.add(key)
        try:
            target = self.bundle(target, base_dir, frame, depth + 1)
        finally:
            self.active.discard(key)
        return self._merge(node, target, base_dir, frame, depth)

    def _inline_external(
        self, node: dict[str, Any], ref: str, base_dir: Path, frame: _FileFrame | None, depth: int
    ) -> Any:
        file_part, fragment = split_ref(ref)
        ref_path = resolve_ref_to_path(file_part, base_dir, self.local_base, self.remote_base)
        canonical = _canonical(ref_path)
        key = f"{canonical}|{fragment or ''}"
        if key in self.active:
            raise CircularReference(ref)

        loaded = load_schema(ref_path)
        target = navigate_fragment(loaded, fragment, source=str(ref_path)) if fragment else loaded

        log.debug("bundle.inline", event="bundle.inline", ref=ref, path=str(ref_path), depth=depth)
        self.active.add(key)
        try:
            target = self.bundle(target, ref_path.parent, _FileFrame(canonical, loaded), depth + 1)
        finally:
            self.active.discard(key)
        return self._merge(node, target, base_dir, frame, depth)

    def _merge(self, node: dict[str, Any], target: Any, base_dir: Path, frame: _FileFrame | None, depth: int) -> Any:
        """Drop $ref, bundle the remaining siblings, then add inlined keys that are not already present."""
        out = {k: self.bundle(v, base_dir, frame, depth) for k, v in node.items() if k != "$ref"}
        if isinstance(target, dict):
            for k, v in target.items():
                out.setdefault(k, v)
        return out


def bundle_refs(schema: Any, base_dir: StrPath) -> Any:
    """
    Return a copy of ``schema`` with external $refs inlined, resolving
    relative refs against ``base_dir``.
    """
    return _Bundler().bundle(deepcopy(schema), Path(base_dir), None)


def bundle_refs_with_url_mapping(schema: Any, base_dir: StrPath, local_base: StrPath, remote_base: str) -> Any:
    """
    Like bundle_refs, but absolute URL refs under ``remote_base`` are read
    from the matching file under ``local_base``.

        remote_base = "https://ucp.dev/draft", local_base = "site"
        "https://ucp.dev/draft/schemas/ucp.json" -> site/schemas/ucp.json
    """
    bundler = _Bundler(local_base=Path(local_base), remote_base=remote_base)
    return bundler.bundle(deepcopy(schema), Path(base_dir), None)
