"""Command line front end and text adapters for `sha1` and `hmac_hash`.

This module provides:

- `sha1_hex(text)` / `hmac_sha1_hex(key, text)`: hash the UTF-8 encoding of
  strings and return lowercase hex.
- `sha1_with_state_tracking(data)`: SHA-1 while recording the chaining value
  after every block.
- CLI usage:

    sha1-cli "message"                  # SHA-1 of the UTF-8 message
    sha1-cli -f path/to/file            # SHA-1 of the file's raw bytes
    sha1-cli -k secret "message"        # HMAC-SHA1 keyed with "secret"
    sha1-cli --trace out.yaml "message" # also dump chaining values as YAML
"""

from __future__ import annotations

import argparse
import sys
from typing import Iterable, List, Tuple

import yaml

from compress import BLOCK_SIZE
from hmac_hash import hmac_sha1
from sha1 import SHA1, sha1


def _chunks(data: bytes, size: int) -> Iterable[bytes]:
    """Yield successive `size`-byte chunks from `data`."""
    for i in range(0, len(data), size):
        yield data[i : i + size]


def sha1_hex(text: str) -> str:
    """SHA-1 hex digest of the UTF-8 encoding of `text`."""
    return sha1(text.encode("utf-8")).hex()


def hmac_sha1_hex(key: str, text: str) -> str:
    """HMAC-SHA1 hex digest of `text` keyed with `key`, both UTF-8 encoded."""
    return hmac_sha1(key.encode("utf-8"), text.encode("utf-8")).hex()


def sha1_with_state_tracking(data: bytes) -> Tuple[bytes, List[List[int]]]:
    """Compute SHA-1 while tracking the chaining value after each block.

    Returns:
        (digest, chaining_values)
        where chaining_values[i] is the 5-word state after message block i;
        the last entry is the final state after padding, i.e. the digest.
    """
    h = SHA1()
    chaining_values: List[List[int]] = []

    for block in _chunks(data, BLOCK_SIZE):
        h.update(block)
        if len(block) == BLOCK_SIZE:
            saved = h.save_state()
            chaining_values.append(list(saved.state))
            h.clean_saved_state(saved)

    digest = h.digest()
    h.clean()

    chaining_values.append(
        [int.from_bytes(word, byteorder="big") for word in _chunks(digest, 4)]
    )
    return digest, chaining_values


def _write_trace(path: str, data: bytes) -> bytes:
    """Write the per-block chaining values of `data` to `path` as YAML."""
    digest, chaining_values = sha1_with_state_tracking(data)

    results = {
        "message_length_bytes": len(data),
        "digest_hex": digest.hex(),
        "blocks": [
            {
                "block_index": block_idx,
                "chaining_value": [f"{word:08x}" for word in state],
            }
            for block_idx, state in enumerate(chaining_values)
        ],
    }

    with open(path, "w") as f:
        yaml.dump(results, f, default_flow_style=False, sort_keys=False)

    return digest


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Without flags, the single argument is interpreted as a UTF-8 string and
    hashed. With `-f`, the named file's raw bytes are hashed. With `-k`, an
    HMAC-SHA1 keyed with the UTF-8 key is printed instead. The resulting hex
    digest is printed to stdout.
    """
    parser = argparse.ArgumentParser(
        prog="sha1-cli",
        description="Print the SHA-1 (or HMAC-SHA1) hex digest of a message or file",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "message",
        nargs="?",
        help="Message to hash, encoded as UTF-8",
    )
    source.add_argument(
        "-f",
        "--file",
        type=str,
        help="Hash the raw bytes of this file instead of a message",
    )
    parser.add_argument(
        "-k",
        "--key",
        type=str,
        help="Compute HMAC-SHA1 with this UTF-8 key",
    )
    parser.add_argument(
        "--trace",
        type=str,
        help="Write per-block chaining values to this YAML file",
    )
    args = parser.parse_args(argv)

    if args.trace is not None and args.key is not None:
        parser.error("--trace cannot be combined with --key")

    if args.file is not None:
        try:
            with open(args.file, "rb") as f:
                data = f.read()
        except OSError as e:
            sys.stderr.write(f"Error reading file '{args.file}': {e}\n")
            return 1
    else:
        data = args.message.encode("utf-8")

    if args.key is not None:
        print(hmac_sha1(args.key.encode("utf-8"), data).hex())
        return 0

    if args.trace is not None:
        try:
            digest = _write_trace(args.trace, data)
        except OSError as e:
            sys.stderr.write(f"Error writing trace '{args.trace}': {e}\n")
            return 1
        sys.stderr.write(f"Trace written to {args.trace}\n")
    else:
        digest = sha1(data)

    print(digest.hex())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
