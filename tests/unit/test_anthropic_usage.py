import types

from infrastructure.providers.anthropic import anthropic_token_usage


def _mk_usage(
    *,
    input_tokens: int,
    cache_creation_input_tokens: int,
    cache_read_input_tokens: int,
    output_tokens: int,
    cache_creation_obj=None,
):
    u = types.SimpleNamespace()
    u.input_tokens = input_tokens
    u.cache_creation_input_tokens = cache_creation_input_tokens
    u.cache_read_input_tokens = cache_read_input_tokens
    u.output_tokens = output_tokens
    u.cache_creation = cache_creation_obj
    return u


def test_breakdown_wins_over_total():
    usage = _mk_usage(
        input_tokens=10,
        cache_creation_input_tokens=999,  # conflicting total
        cache_read_input_tokens=3,
        output_tokens=7,
        cache_creation_obj={"ephemeral_5m_input_tokens": 4, "ephemeral_1h_input_tokens": 5},
    )
    out = anthropic_token_usage(usage, cache_ttl="5m")
    assert out["cache_write_5m_tokens"] == 4
    assert out["cache_write_1h_tokens"] == 5
    assert out["cache_read_tokens"] == 3
    assert out["input_tokens"] == 10 + 9 + 3
    assert out["total_tokens"] == 10 + 9 + 3 + 7


def test_breakdown_as_object():
    usage = _mk_usage(
        input_tokens=1,
        cache_creation_input_tokens=2,
        cache_read_input_tokens=0,
        output_tokens=1,
        cache_creation_obj=types.SimpleNamespace(ephemeral_5m_input_tokens=0, ephemeral_1h_input_tokens=2),
    )
    out = anthropic_token_usage(usage)
    assert out["cache_write_1h_tokens"] == 2
    assert out["input_tokens"] == 3


def test_ttl_fallback_attributes_all_to_1h():
    usage = _mk_usage(
        input_tokens=10,
        cache_creation_input_tokens=6,
        cache_read_input_tokens=2,
        output_tokens=1,
    )
    out = anthropic_token_usage(usage, cache_ttl="1h")
    assert out["cache_write_1h_tokens"] == 6
    assert out["cache_write_5m_tokens"] == 0
    assert out["input_tokens"] == 10 + 6 + 2


def test_ttl_fallback_attributes_all_to_5m():
    usage = _mk_usage(
        input_tokens=10,
        cache_creation_input_tokens=6,
        cache_read_input_tokens=2,
        output_tokens=1,
    )
    out = anthropic_token_usage(usage, cache_ttl="5m")
    assert out["cache_write_5m_tokens"] == 6
    assert out["cache_write_1h_tokens"] == 0
    assert out["input_tokens"] == 10 + 6 + 2


def test_missing_usage_fields_count_as_zero():
    out = anthropic_token_usage(types.SimpleNamespace(output_tokens=None))
    assert out["input_tokens"] == 0
    assert out["total_tokens"] == 0
