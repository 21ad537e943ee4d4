import pytest

from compress import (
    INITIAL_STATE,
    K_VALUES,
    MASK32,
    _rotl,
    compress80,
    compression,
    expand_message_schedule,
    hash_blocks,
    round_function,
)


def _padded_abc() -> bytes:
    """Single padded block for the message b"abc" (24 bits)."""
    return b"abc" + b"\x80" + b"\x00" * 52 + (24).to_bytes(8, byteorder="big")


def _state_bytes(state) -> bytes:
    return b"".join(word.to_bytes(4, byteorder="big") for word in state)


@pytest.mark.parametrize(
    "x,n,expected",
    [
        (0x80000000, 1, 0x00000001),
        (0x00000001, 31, 0x80000000),
        (0x12345678, 4, 0x23456781),
        (0xFFFFFFFF, 5, 0xFFFFFFFF),
        (0x1_00000001, 1, 0x00000002),  # input is reduced to 32 bits first
    ],
)
def test_rotl(x, n, expected):
    assert _rotl(x, n) == expected


@pytest.mark.parametrize(
    "i,k",
    [
        (0, 0x5A827999),
        (19, 0x5A827999),
        (20, 0x6ED9EBA1),
        (39, 0x6ED9EBA1),
        (40, 0x8F1BBCDC),
        (59, 0x8F1BBCDC),
        (60, 0xCA62C1D6),
        (79, 0xCA62C1D6),
    ],
)
def test_round_function_constant_by_range(i, k):
    _, k_out = round_function(i, 0, 0, 0)
    assert k_out == k


def test_round_function_boolean_functions():
    b, c, d = 0xF0F0F0F0, 0xCCCCCCCC, 0xAAAAAAAA

    ch, _ = round_function(0, b, c, d)
    parity, _ = round_function(20, b, c, d)
    maj, _ = round_function(40, b, c, d)
    parity_late, _ = round_function(60, b, c, d)

    assert ch == ((b & c) | (~b & d)) & MASK32
    assert parity == b ^ c ^ d
    assert maj == (b & c) | (b & d) | (c & d)
    assert parity_late == parity


@pytest.mark.parametrize("i", [-1, 80, 1000])
def test_round_function_rejects_out_of_range_index(i):
    with pytest.raises(ValueError):
        round_function(i, 0, 0, 0)


def test_compression_all_zero_state():
    # f = Ch(0, 0, 0) = 0, so temp is just the first round constant.
    assert compression(0, 0, 0, 0, 0, 0, 0) == (K_VALUES[0], 0, 0, 0, 0)


def test_compression_shifts_working_words():
    a, b, c, d, e = 0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476, 0xC3D2E1F0
    w = 0x61626380

    a_new, b_new, c_new, d_new, e_new = compression(a, b, c, d, e, w, 0)

    f = ((b & c) | (~b & d)) & MASK32
    assert a_new == (_rotl(a, 5) + f + e + K_VALUES[0] + w) & MASK32
    assert b_new == a
    assert c_new == _rotl(b, 30)
    assert d_new == c
    assert e_new == d


def test_compression_wraps_modulo_2_32():
    a_new, *_ = compression(0xFFFFFFFF, 0, 0, 0, 0xFFFFFFFF, 0xFFFFFFFF, 79)
    assert 0 <= a_new <= MASK32


def test_expand_message_schedule_recurrence():
    w = [0] * 80
    w[0] = 1

    expand_message_schedule(w)

    assert w[0] == 1
    # w[16] = rotl1(w[13] ^ w[8] ^ w[2] ^ w[0])
    assert w[16] == 2
    for i in range(16, 80):
        assert w[i] == _rotl(w[i - 3] ^ w[i - 8] ^ w[i - 14] ^ w[i - 16], 1)


def test_expand_message_schedule_needs_room_for_80_words():
    with pytest.raises(ValueError):
        expand_message_schedule([0] * 16)


def test_compress80_rejects_short_schedule():
    with pytest.raises(ValueError):
        compress80(*INITIAL_STATE, [0] * 64)


def test_hash_blocks_single_block_abc():
    state = list(INITIAL_STATE)
    w = [0] * 80

    pos = hash_blocks(w, state, _padded_abc(), 0, 64)

    assert pos == 64
    assert _state_bytes(state).hex() == "a9993e364706816aba3e25717850c26c9cd0d89d"


def test_hash_blocks_accumulates_into_state():
    block = _padded_abc()
    w = [0] * 80
    state = list(INITIAL_STATE)

    ws = [int.from_bytes(block[4 * i : 4 * (i + 1)], byteorder="big") for i in range(16)]
    ws += [0] * 64
    expand_message_schedule(ws)
    work = compress80(*INITIAL_STATE, ws)

    hash_blocks(w, state, block, 0, 64)

    assert state == [(h + x) & MASK32 for h, x in zip(INITIAL_STATE, work)]


def test_hash_blocks_leaves_partial_tail():
    data = _padded_abc() + b"\x01" * 36
    state = list(INITIAL_STATE)

    pos = hash_blocks([0] * 80, state, data, 0, len(data))

    assert pos == 64
    assert _state_bytes(state).hex() == "a9993e364706816aba3e25717850c26c9cd0d89d"


def test_hash_blocks_honours_offset():
    data = b"\xff" * 10 + _padded_abc()
    state = list(INITIAL_STATE)

    pos = hash_blocks([0] * 80, state, data, 10, 64)

    assert pos == 74
    assert _state_bytes(state).hex() == "a9993e364706816aba3e25717850c26c9cd0d89d"


@pytest.mark.parametrize("length", [0, 1, 63])
def test_hash_blocks_ignores_less_than_one_block(length):
    state = list(INITIAL_STATE)

    pos = hash_blocks([0] * 80, state, b"\x00" * length, 0, length)

    assert pos == 0
    assert state == list(INITIAL_STATE)
