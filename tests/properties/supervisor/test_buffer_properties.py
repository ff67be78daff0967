"""Property-based tests for the log buffer and secret redaction."""

from hypothesis import given, strategies as st

from fwgate.supervisor import LogBuffer, LogLine, redact_secrets

# =============================================================================
# Strategies
# =============================================================================

line_texts = st.lists(st.text(min_size=1, max_size=20), max_size=60)
capacities = st.integers(min_value=1, max_value=50)

secret_keys = st.sampled_from(
    ["api_key", "api-key", "apikey", "token", "password", "secret", "auth"]
)
separators = st.sampled_from(["=", ":", ": ", "= "])
secret_values = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789",
    min_size=1,
    max_size=30,
)

# Text that cannot contain any credential pattern
letterless_text = st.text(alphabet="0123456789 .,;/()[]{}<>!?#%+*", max_size=80)


def _fill(capacity: int, texts: list[str]) -> LogBuffer:
    buffer = LogBuffer(capacity)
    for text in texts:
        buffer.append(LogLine(timestamp="2026-01-01T00:00:00Z", stream="stdout", text=text))
    return buffer


# =============================================================================
# LogBuffer Properties
# =============================================================================


@given(capacity=capacities, texts=line_texts)
def test_buffer_never_exceeds_capacity(capacity: int, texts: list[str]) -> None:
    """Property: the buffer holds min(appended, capacity) lines."""
    buffer = _fill(capacity, texts)

    assert len(buffer) == min(len(texts), capacity)


@given(capacity=capacities, texts=line_texts)
def test_buffer_keeps_most_recent_lines_in_order(
    capacity: int, texts: list[str]
) -> None:
    """Property: tail() is the last `capacity` appended lines, oldest first."""
    buffer = _fill(capacity, texts)

    expected = texts[-capacity:] if texts else []
    assert [line.text for line in buffer.tail()] == expected


@given(
    capacity=capacities,
    texts=line_texts,
    limit=st.integers(min_value=-5, max_value=80),
)
def test_tail_limit_is_suffix_of_full_tail(
    capacity: int, texts: list[str], limit: int
) -> None:
    """Property: tail(limit) is the last `limit` lines of tail()."""
    buffer = _fill(capacity, texts)
    everything = buffer.tail()

    limited = buffer.tail(limit)

    if limit <= 0:
        assert limited == []
    else:
        assert limited == everything[-limit:]
        assert len(limited) == min(limit, len(everything))


# =============================================================================
# Redaction Properties
# =============================================================================


@given(text=letterless_text)
def test_text_without_letters_is_unchanged(text: str) -> None:
    """Property: lines that cannot hold a credential pass through untouched."""
    assert redact_secrets(text) == text


@given(key=secret_keys, separator=separators, value=secret_values, upper=st.booleans())
def test_key_value_secret_is_fully_masked(
    key: str, separator: str, value: str, upper: bool
) -> None:
    """Property: key=value credentials are replaced whatever the key's case."""
    if upper:
        key = key.upper()

    assert redact_secrets(f"{key}{separator}{value}") == "[REDACTED]"


@given(suffix=st.text(alphabet="abcXYZ0123456789", min_size=20, max_size=48))
def test_sk_keys_keep_prefix_only(suffix: str) -> None:
    """Property: sk- keys are masked after their prefix."""
    assert redact_secrets(f"using sk-{suffix}") == "using sk-[REDACTED]"


@given(token=secret_values)
def test_bearer_tokens_are_masked(token: str) -> None:
    """Property: bearer tokens never survive redaction."""
    redacted = redact_secrets(f"Authorization header Bearer {token}")

    assert redacted == "Authorization header Bearer [REDACTED]"
