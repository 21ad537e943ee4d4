"""HMAC (RFC 2104) over any hasher with the `SHA1` incremental interface.

    HMAC(K, m) = H((K0 ^ opad) || H((K0 ^ ipad) || m))

where K0 is the key hashed down (if longer than the block size) and
zero-padded to the block size, ipad is 0x36 repeated and opad is 0x5C
repeated.

The hasher is passed as a factory (usually the class itself), so any type
exposing `block_size`, `digest_length`, `reset`, `update`, `finish` and
`clean` can be used. If it also provides `save_state` / `restore_state`, the
pad-prefixed inner and outer states are computed once per key and restored
on every `reset()` instead of hashing the pads again.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from sha1 import SHA1, _wipe


IPAD = 0x36
OPAD = 0x5C


class Hash(Protocol):
    """Incremental hasher interface accepted by `HMAC`.

    `save_state` / `restore_state` are optional; without them the key pads are
    hashed again on every reset.
    """

    digest_length: int
    block_size: int

    def reset(self) -> "Hash": ...

    def update(self, data, length: Optional[int] = None) -> "Hash": ...

    def finish(self, out) -> "Hash": ...

    def clean(self) -> None: ...


class HMAC:
    """Incremental HMAC over the hasher built by `hash_factory`."""

    def __init__(self, hash_factory: Callable[[], Hash], key: bytes) -> None:
        self._inner = hash_factory()
        self._outer = hash_factory()
        self._finished = False

        self.block_size = self._outer.block_size
        self.digest_length = self._outer.digest_length

        pad = bytearray(self.block_size)
        if len(key) > self.block_size:
            # Long keys are replaced by their digest.
            self._inner.update(key).finish(pad)
            self._inner.clean()
        else:
            pad[: len(key)] = key

        for i in range(len(pad)):
            pad[i] ^= IPAD
        self._ipad = bytearray(pad)

        for i in range(len(pad)):
            pad[i] ^= IPAD ^ OPAD
        self._opad = bytearray(pad)

        _wipe(pad)

        self._inner_key_state = None
        self._outer_key_state = None
        self._absorb_pads()

        if hasattr(self._inner, "save_state") and hasattr(self._inner, "restore_state"):
            self._inner_key_state = self._inner.save_state()
            self._outer_key_state = self._outer.save_state()
            # The snapshots replace the pads from here on.
            self._drop_pads()

    def _absorb_pads(self) -> None:
        self._inner.reset().update(self._ipad)
        self._outer.reset().update(self._opad)

    def _drop_pads(self) -> None:
        if self._ipad is not None:
            _wipe(self._ipad)
            _wipe(self._opad)
        self._ipad = None
        self._opad = None

    def reset(self) -> "HMAC":
        """Reset to the key-prefixed state, ready for a new message."""
        if self._inner_key_state is not None:
            self._inner.restore_state(self._inner_key_state)
            self._outer.restore_state(self._outer_key_state)
        else:
            self._absorb_pads()
        self._finished = False
        return self

    def clean(self) -> None:
        """Wipe key material and both hashers."""
        if self._inner_key_state is not None:
            if hasattr(self._inner, "clean_saved_state"):
                self._inner.clean_saved_state(self._inner_key_state)
                self._outer.clean_saved_state(self._outer_key_state)
            self._inner_key_state = None
            self._outer_key_state = None
        self._drop_pads()
        self._inner.clean()
        self._outer.clean()

    def update(self, data, length: Optional[int] = None) -> "HMAC":
        """Feed message data into the inner hash."""
        self._inner.update(data, length)
        return self

    def finish(self, out) -> "HMAC":
        """Write the MAC into `out`. Repeated calls write the same value."""
        if self._finished:
            self._outer.finish(out)
            return self

        self._inner.finish(out)
        self._outer.update(bytes(out[: self.digest_length])).finish(out)
        self._finished = True
        return self

    def digest(self) -> bytes:
        """Return the final MAC."""
        out = bytearray(self.digest_length)
        self.finish(out)
        return bytes(out)

    def hexdigest(self) -> str:
        """Return the final MAC as lowercase hex."""
        return self.digest().hex()


def hmac(hash_factory: Callable[[], Hash], key: bytes, data: bytes) -> bytes:
    """Compute HMAC of `data` under `key` with the given hasher."""
    h = HMAC(hash_factory, key)
    h.update(data)
    digest = h.digest()
    h.clean()
    return digest


def hmac_sha1(key: bytes, data: bytes) -> bytes:
    """Compute HMAC-SHA1 of `data` under `key`."""
    return hmac(SHA1, key, data)
