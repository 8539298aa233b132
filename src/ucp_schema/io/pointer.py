# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
JSON Pointer fragment helpers shared by the bundler and the linter.
"""

from copy import deepcopy
from typing import Any

from ..errors import FragmentNotFound

__all__ = [
    "escape_pointer_token",
    "navigate_fragment",
    "split_ref",
]


def split_ref(ref: str) -> tuple[str, str | None]:
    """
    Split a $ref into (file_part, fragment_with_hash).

      "foo.json#/a/b" -> ("foo.json", "#/a/b")
      "foo.json"      -> ("foo.json", None)
      "#/a"           -> ("", "#/a")
    """
    idx = ref.find("#")
    if idx < 0:
        return ref, None
    return ref[:idx], ref[idx:]


def escape_pointer_token(token: str) -> str:
    """Inverse of pointer unescaping: '~' -> '~0', '/' -> '~1'."""
    return token.replace("~", "~0").replace("/", "~1")


def _unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def navigate_fragment(root: Any, fragment: str, *, source: str | None = None) -> Any:
    """
    Return a copy of the value at ``fragment`` (e.g. "#/$defs/foo") within ``root``.

    Only object keys are walked. "#" (or "#/") returns the whole root.
    Raises FragmentNotFound naming the full fragment when any step is missing.
    """
    path = fragment.lstrip("#")
    if path.startswith("/"):
        path = path[1:]
    if not path:
        return deepcopy(root)

    current = root
    for part in path.split("/"):
        key = _unescape(part)
        if not isinstance(current, dict) or key not in current:
            raise FragmentNotFound(fragment, source)
        current = current[key]
    return deepcopy(current)
