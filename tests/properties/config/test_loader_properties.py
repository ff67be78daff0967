"""Property-based tests for configuration merging and env value parsing."""

import copy
from typing import Any

from hypothesis import given, strategies as st

from fwgate.config._loader import deep_merge, parse_string_value

# =============================================================================
# Strategies
# =============================================================================

keys = st.text(alphabet="abcdefgh_", min_size=1, max_size=6)
scalars = st.one_of(
    st.integers(),
    st.booleans(),
    st.text(max_size=10),
    st.lists(st.integers(), max_size=3),
)
config_dicts = st.recursive(
    st.dictionaries(keys, scalars, max_size=4),
    lambda children: st.dictionaries(keys, st.one_of(scalars, children), max_size=4),
    max_leaves=12,
)

plain_words = st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=12)


# =============================================================================
# deep_merge Properties
# =============================================================================


@given(base=config_dicts)
def test_merge_with_empty_override_is_identity(base: dict[str, Any]) -> None:
    """Property: merging nothing over a config leaves it unchanged."""
    assert deep_merge(base, {}) == base
    assert deep_merge({}, base) == base


@given(base=config_dicts, override=config_dicts)
def test_merge_does_not_mutate_inputs(
    base: dict[str, Any], override: dict[str, Any]
) -> None:
    """Property: deep_merge returns a new dict and leaves inputs untouched."""
    base_before = copy.deepcopy(base)
    override_before = copy.deepcopy(override)

    _ = deep_merge(base, override)

    assert base == base_before
    assert override == override_before


@given(base=config_dicts, override=config_dicts)
def test_override_scalars_win(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Property: every non-dict override value appears in the result."""
    merged = deep_merge(base, override)

    assert merged.keys() == base.keys() | override.keys()
    for key, value in override.items():
        if not (isinstance(value, dict) and isinstance(base.get(key), dict)):
            assert merged[key] == value


# =============================================================================
# parse_string_value Properties
# =============================================================================


@given(value=st.integers())
def test_integers_parse_back(value: int) -> None:
    """Property: decimal integer strings become ints."""
    assert parse_string_value(str(value)) == value


@given(value=st.booleans(), upper=st.booleans())
def test_booleans_parse_case_insensitively(value: bool, upper: bool) -> None:
    """Property: true/false parse as booleans in any case."""
    text = str(value).lower()
    if upper:
        text = text.upper()

    assert parse_string_value(text) is value


@given(word=plain_words)
def test_plain_words_stay_strings(word: str) -> None:
    """Property: alphabetic values other than true/false are kept verbatim."""
    if word in ("true", "false"):
        return

    assert parse_string_value(word) == word


@given(items=st.lists(plain_words, max_size=5))
def test_json_arrays_parse_to_lists(items: list[str]) -> None:
    """Property: JSON arrays become lists, e.g. for daemon commands."""
    text = "[" + ", ".join(f'"{item}"' for item in items) + "]"

    assert parse_string_value(text) == items
