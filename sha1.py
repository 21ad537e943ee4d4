"""Incremental SHA-1 built on `hash_blocks` from `compress.py`.

This module provides:

- `SHA1`: a stateful hasher fed with `update()` in chunks of any size and
  finalized with `finish()` / `digest()`.
- `SavedState`: a snapshot of an unfinished hasher, used by HMAC to avoid
  re-hashing the key pads for every message.
- `sha1(data: bytes) -> bytes`: one-shot digest of `data`.

Typical use:

    h = SHA1()
    h.update(b"hello ")
    h.update(b"world")
    digest = h.digest()
    h.clean()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from compress import BLOCK_SIZE, INITIAL_STATE, MASK32, ROUNDS, hash_blocks


DIGEST_LENGTH = 20

MASK64 = 0xFFFFFFFFFFFFFFFF


class HashFinishedError(RuntimeError):
    """Raised when a finished hasher is updated or snapshotted without a reset."""


class OutputBufferTooSmallError(ValueError):
    """Raised when the buffer passed to `finish()` cannot hold the digest."""


@dataclass
class SavedState:
    """Intermediate hasher state returned by `SHA1.save_state()`.

    ``buffer`` is ``None`` when no partial block was pending at save time.
    The finished flag is deliberately not part of the snapshot.
    """

    state: List[int]
    buffer: Optional[bytearray]
    buffer_length: int
    bytes_hashed: int


class SHA1:
    """Stateful SHA-1 hasher.

    A hasher is either active (accepting `update()`) or finished. Finishing
    is idempotent; `reset()` makes the instance reusable. Call `clean()` once
    the hasher is no longer needed to zero its buffers.
    """

    digest_length: int = DIGEST_LENGTH
    block_size: int = BLOCK_SIZE

    def __init__(self) -> None:
        self._state: List[int] = [0] * 5
        self._temp: List[int] = [0] * ROUNDS
        # Two blocks: padding may spill the last partial block into a second one.
        self._buffer = bytearray(2 * BLOCK_SIZE)
        self._buffer_length = 0
        self._bytes_hashed = 0
        self._finished = False
        self.reset()

    def _init_state(self) -> None:
        self._state[:] = INITIAL_STATE

    def reset(self) -> "SHA1":
        """Reset hash state so the instance can hash other data."""
        self._init_state()
        self._buffer_length = 0
        self._bytes_hashed = 0
        self._finished = False
        return self

    def clean(self) -> None:
        """Zero internal buffers and reset hash state."""
        _wipe(self._buffer)
        _wipe(self._temp)
        self.reset()

    def update(self, data, length: Optional[int] = None) -> "SHA1":
        """Feed the first `length` bytes of `data` (all of it by default).

        Raises `HashFinishedError` if the hasher was already finished; it has
        to be reset before it can be updated again.
        Raises `ValueError` if `length` is negative or exceeds `len(data)`.
        """
        if self._finished:
            raise HashFinishedError("SHA1: can't update because hash was finished")

        if length is None:
            length = len(data)
        elif not 0 <= length <= len(data):
            raise ValueError(
                f"SHA1: length must be in 0..{len(data)}, got {length}"
            )

        pos = 0
        self._bytes_hashed += length

        if self._buffer_length > 0:
            # Top up the pending partial block first.
            take = min(BLOCK_SIZE - self._buffer_length, length)
            self._buffer[self._buffer_length : self._buffer_length + take] = data[:take]
            self._buffer_length += take
            pos = take
            length -= take

            if self._buffer_length == BLOCK_SIZE:
                hash_blocks(self._temp, self._state, self._buffer, 0, BLOCK_SIZE)
                self._buffer_length = 0

        if length >= BLOCK_SIZE:
            # Whole blocks go straight from `data`, bypassing the buffer.
            pos = hash_blocks(self._temp, self._state, data, pos, length)
            length %= BLOCK_SIZE

        if length > 0:
            self._buffer[self._buffer_length : self._buffer_length + length] = data[
                pos : pos + length
            ]
            self._buffer_length += length

        return self

    def finish(self, out) -> "SHA1":
        """Finalize the hash and write the 20-byte digest into `out`.

        If the hash was already finalized, the same digest is written again
        without reprocessing any input.
        """
        if len(out) < self.digest_length:
            raise OutputBufferTooSmallError(
                f"SHA1: output buffer must hold {self.digest_length} bytes, got {len(out)}"
            )

        if not self._finished:
            bit_length = (self._bytes_hashed * 8) & MASK64
            left = self._buffer_length
            pad_length = BLOCK_SIZE if left % BLOCK_SIZE < 56 else 2 * BLOCK_SIZE

            # Append the '1' bit (0x80), zero-fill up to the length field.
            self._buffer[left] = 0x80
            for i in range(left + 1, pad_length - 8):
                self._buffer[i] = 0

            # 64-bit big-endian length in bits, as two 32-bit words.
            self._buffer[pad_length - 8 : pad_length - 4] = (bit_length >> 32).to_bytes(
                4, byteorder="big"
            )
            self._buffer[pad_length - 4 : pad_length] = (bit_length & MASK32).to_bytes(
                4, byteorder="big"
            )

            hash_blocks(self._temp, self._state, self._buffer, 0, pad_length)
            self._finished = True

        for i in range(self.digest_length // 4):
            out[4 * i : 4 * (i + 1)] = self._state[i].to_bytes(4, byteorder="big")

        return self

    def digest(self) -> bytes:
        """Return the final hash digest."""
        out = bytearray(self.digest_length)
        self.finish(out)
        return bytes(out)

    def hexdigest(self) -> str:
        """Return the final hash digest as lowercase hex."""
        return self.digest().hex()

    def save_state(self) -> SavedState:
        """Snapshot the chaining value, pending buffer and byte count.

        Used together with `restore_state()` to resume hashing from a common
        prefix, e.g. an HMAC key pad. Raises `HashFinishedError` if the hash
        was already finished.
        """
        if self._finished:
            raise HashFinishedError("SHA1: cannot save finished state")

        return SavedState(
            state=list(self._state),
            buffer=bytearray(self._buffer) if self._buffer_length > 0 else None,
            buffer_length=self._buffer_length,
            bytes_hashed=self._bytes_hashed,
        )

    def restore_state(self, saved_state: SavedState) -> "SHA1":
        """Restore a snapshot taken by `save_state()` and clear the finished flag."""
        self._state[:] = saved_state.state
        self._buffer_length = saved_state.buffer_length
        if saved_state.buffer is not None:
            self._buffer[:] = saved_state.buffer
        self._bytes_hashed = saved_state.bytes_hashed
        self._finished = False
        return self

    def clean_saved_state(self, saved_state: SavedState) -> None:
        """Zero a snapshot returned by `save_state()`."""
        _wipe(saved_state.state)
        if saved_state.buffer is not None:
            _wipe(saved_state.buffer)
        saved_state.buffer_length = 0
        saved_state.bytes_hashed = 0


def _wipe(array) -> None:
    """Overwrite a mutable sequence of ints with zeros, in place."""
    for i in range(len(array)):
        array[i] = 0


def sha1(data: bytes) -> bytes:
    """Compute the SHA-1 digest of `data`."""
    h = SHA1()
    h.update(data)
    digest = h.digest()
    h.clean()
    return digest
