from __future__ import annotations

import pytest

from ucp_schema.errors import FragmentNotFound
from ucp_schema.io.pointer import escape_pointer_token, navigate_fragment, split_ref

pytestmark = [pytest.mark.unit]

DOC = {
    "$defs": {
        "address": {"type": "object", "properties": {"zip": {"type": "string"}}},
        "a/b": {"const": "slash"},
        "m~n": {"const": "tilde"},
    },
    "type": "object",
}


@pytest.mark.parametrize(
    "ref,expected",
    [
        ("types/buyer.json#/$defs/x", ("types/buyer.json", "#/$defs/x")),
        ("types/buyer.json", ("types/buyer.json", None)),
        ("#/$defs/x", ("", "#/$defs/x")),
        ("#", ("", "#")),
    ],
)
def test_split_ref(ref, expected):
    assert split_ref(ref) == expected


def test_hash_alone_returns_whole_root_as_copy():
    out = navigate_fragment(DOC, "#")
    assert out == DOC
    out["type"] = "changed"
    assert DOC["type"] == "object"


def test_navigates_nested_keys():
    assert navigate_fragment(DOC, "#/$defs/address/properties/zip") == {"type": "string"}


def test_unescapes_pointer_tokens():
    assert navigate_fragment(DOC, "#/$defs/a~1b") == {"const": "slash"}
    assert navigate_fragment(DOC, "#/$defs/m~0n") == {"const": "tilde"}


def test_missing_step_names_full_fragment():
    with pytest.raises(FragmentNotFound) as ei:
        navigate_fragment(DOC, "#/$defs/missing/deeper", source="schema.json")
    assert ei.value.fragment == "#/$defs/missing/deeper"
    assert "#/$defs/missing/deeper" in str(ei.value)
    assert "schema.json" in str(ei.value)


def test_cannot_walk_into_scalars_or_arrays():
    with pytest.raises(FragmentNotFound):
        navigate_fragment(DOC, "#/type/length")
    with pytest.raises(FragmentNotFound):
        navigate_fragment({"items": [{"a": 1}]}, "#/items/0")


def test_escape_is_inverse_of_unescape():
    token = "a/b~c"
    assert escape_pointer_token(token) == "a~1b~0c"
    assert navigate_fragment({token: 1}, f"#/{escape_pointer_token(token)}") == 1
