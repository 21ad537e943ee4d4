"""Forward SHA-1 compression.

This implements the SHA-1 block compression as described in FIPS 180-4,
section 6.1.2.

Given the current working state words `(a, b, c, d, e)`, the round index `i`
and the message schedule word `w`, one round computes:

    f, k  = round_function(i, b, c, d)
    temp  = (a <<< 5) + f + e + k + w

    a' = temp
    b' = a
    c' = b <<< 30
    d' = c
    e' = d

After 80 rounds the working words are added into the chaining value.
All additions are performed modulo 2**32, as in SHA-1.
"""

from __future__ import annotations

from typing import List, MutableSequence, Sequence, Tuple


MASK32 = 0xFFFFFFFF

BLOCK_SIZE = 64
ROUNDS = 80

# Initial hash value H(0) from FIPS 180-4, section 5.3.1.
INITIAL_STATE: Tuple[int, ...] = (
    0x67452301,
    0xEFCDAB89,
    0x98BADCFE,
    0x10325476,
    0xC3D2E1F0,
)

# Round constants, one per group of 20 rounds.
K_VALUES: Tuple[int, ...] = (
    0x5A827999,
    0x6ED9EBA1,
    0x8F1BBCDC,
    0xCA62C1D6,
)


def _rotl(x: int, n: int) -> int:
    """Left-rotate a 32-bit word `x` by `n` bits."""
    x &= MASK32
    return ((x << n) | (x >> (32 - n))) & MASK32


def round_function(i: int, b: int, c: int, d: int) -> Tuple[int, int]:
    """Return the boolean function value `f` and constant `k` for round `i`.

    Parameters
    ----------
    i : int
        Round index in ``0..79``.
    b, c, d : int
        32-bit working state words.

    Returns
    -------
    (f, k) : tuple[int, int]
    """
    if 0 <= i <= 19:
        # Ch(b, c, d)
        return ((b & c) | ((~b) & d)) & MASK32, K_VALUES[0]
    if 20 <= i <= 39:
        # Parity(b, c, d)
        return (b ^ c ^ d) & MASK32, K_VALUES[1]
    if 40 <= i <= 59:
        # Maj(b, c, d)
        return ((b & c) | (b & d) | (c & d)) & MASK32, K_VALUES[2]
    if 60 <= i <= 79:
        return (b ^ c ^ d) & MASK32, K_VALUES[3]
    raise ValueError(f"SHA-1 round index must be in 0..79, got {i}")


def compression(
    a: int,
    b: int,
    c: int,
    d: int,
    e: int,
    w: int,
    i: int,
) -> Tuple[int, int, int, int, int]:
    """Perform one SHA-1 compression round.

    Parameters
    ----------
    a, b, c, d, e : int
        32-bit words representing the current working state.
    w : int
        Message schedule word `w[i]`.
    i : int
        Round index, which selects the boolean function and round constant.

    Returns
    -------
    (a_new, b_new, c_new, d_new, e_new) : tuple[int, ...]
        Updated working state after one round, all reduced modulo 2**32.
    """
    f, k = round_function(i, b, c, d)
    temp = (_rotl(a, 5) + f + e + k + w) & MASK32

    return temp, a & MASK32, _rotl(b, 30), c & MASK32, d & MASK32


def expand_message_schedule(w: MutableSequence[int]) -> MutableSequence[int]:
    """Expand W[0..15] in place to the full 80-word schedule W[0..79].

    ``w`` must already have room for 80 words; the first 16 are left intact.
    """
    if len(w) < ROUNDS:
        raise ValueError(
            f"Message schedule must have room for {ROUNDS} words, got {len(w)}"
        )

    for i in range(16, ROUNDS):
        w[i] = _rotl(w[i - 3] ^ w[i - 8] ^ w[i - 14] ^ w[i - 16], 1)

    return w


def compress80(
    a: int,
    b: int,
    c: int,
    d: int,
    e: int,
    ws: Sequence[int],
) -> Tuple[int, int, int, int, int]:
    """Run the full 80-round SHA-1 compression loop for one block.

    Parameters
    ----------
    a, b, c, d, e : int
        Initial working state words (typically the current hash value).
    ws : Sequence[int]
        The 80-word message schedule `w[0..79]` for this block.

    Returns
    -------
    (a, b, c, d, e) : tuple[int, ...]
        Final working state words after 80 rounds. These still have to be
        added into the chaining value.
    """
    if len(ws) != ROUNDS:
        raise ValueError(f"compress80 expects 80 message schedule words, got {len(ws)}")

    for i in range(ROUNDS):
        a, b, c, d, e = compression(a, b, c, d, e, ws[i], i)

    return a, b, c, d, e


def hash_blocks(
    w: List[int],
    state: List[int],
    data,
    pos: int,
    length: int,
) -> int:
    """Compress every complete 64-byte block of ``data[pos:pos + length]``.

    ``state`` (5 words) and the schedule ``w`` (80 words) are caller-owned and
    mutated in place. Any trailing partial block is left untouched; the
    returned position is where it starts, so the caller can buffer it.
    """
    while length >= BLOCK_SIZE:
        for i in range(16):
            j = pos + 4 * i
            w[i] = int.from_bytes(data[j : j + 4], byteorder="big")

        expand_message_schedule(w)

        a, b, c, d, e = compress80(state[0], state[1], state[2], state[3], state[4], w)

        state[0] = (state[0] + a) & MASK32
        state[1] = (state[1] + b) & MASK32
        state[2] = (state[2] + c) & MASK32
        state[3] = (state[3] + d) & MASK32
        state[4] = (state[4] + e) & MASK32

        pos += BLOCK_SIZE
        length -= BLOCK_SIZE

    return pos
