# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Public exports for document loading, fragment navigation and $ref bundling.
"""

from .bundler import bundle_refs, bundle_refs_with_url_mapping, resolve_ref_to_path
from .loader import is_url, load_schema, load_schema_auto, load_schema_str, load_schema_url
from .pointer import navigate_fragment, split_ref

__all__ = [
    # loader
    "is_url",
    "load_schema",
    "load_schema_auto",
    "load_schema_str",
    "load_schema_url",
    # pointer
    "navigate_fragment",
    "split_ref",
    # bundler
    "bundle_refs",
    "bundle_refs_with_url_mapping",
    "resolve_ref_to_path",
]
