# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Compiler: declared capabilities -> CapabilityGraph.

This pass performs, in order:
- parent existence checks for every ``extends`` entry
- root detection (exactly one capability without ``extends``)
- reachability of every extension to the root through any parent chain

Composition reads the compiled graph only; it never re-validates.
"""

from collections.abc import Mapping, Sequence

from pydantic import BaseModel, Field

from ..errors import EmptyCapabilities, MultipleRootCapabilities, NoRootCapability, OrphanExtension, UnknownParent
from .spec import Capability

# -------------------------------
# Graph model
# -------------------------------


class CapabilityGraph(BaseModel):
    """Validated capability graph rooted at a single capability."""

    root: Capability
    extensions: list[Capability] = Field(default_factory=list)  # declaration order
    parents_by_child: dict[str, list[str]] = Field(default_factory=dict)

    @property
    def is_root_only(self) -> bool:
        return not self.extensions


# -------------------------------
# Helpers
# -------------------------------


def reaches_root(name: str, parents_by_child: Mapping[str, Sequence[str]], root: str) -> bool:
    """
    True if ``name`` reaches ``root`` by following parent edges.

    Explicit stack plus visited set: each capability is expanded at most
    once, so shared ancestors (diamonds) and stray cycles terminate.
    """
    visited: set[str] = set()
    stack = [name]
    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)
        for parent in parents_by_child.get(current, ()):
            if parent == root:
                return True
            stack.append(parent)
    return False


# -------------------------------
# Public API
# -------------------------------


def compile_capability_graph(capabilities: Sequence[Capability]) -> CapabilityGraph:
    """Validate the declared capability set and return its graph."""
    if not capabilities:
        raise EmptyCapabilities()

    declared = {c.name for c in capabilities}
    parents_by_child: dict[str, list[str]] = {}
    for cap in capabilities:
        if cap.extends is None:
            continue
        for parent in cap.extends:
            if parent not in declared:
                raise UnknownParent(cap.name, parent)
        parents_by_child[cap.name] = list(cap.extends)

    roots = [c for c in capabilities if c.is_root]
    if not roots:
        raise NoRootCapability()
    if len(roots) > 1:
        raise MultipleRootCapabilities([c.name for c in roots])
    root = roots[0]

    extensions = [c for c in capabilities if not c.is_root]
    for ext in extensions:
        if not reaches_root(ext.name, parents_by_child, root.name):
            raise OrphanExtension(ext.name, root.name)

    return CapabilityGraph(
        root=root,
        extensions=extensions,
        parents_by_child=parents_by_child,
    )
