"""
Deterministic encoding helpers for snapshots and commitments.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any


def _reject_non_canonical(value: Any) -> None:
    if isinstance(value, float):
        raise TypeError("floats are not allowed in canonical encoding")
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError("dict keys must be str for canonical encoding")
            _reject_non_canonical(v)
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            _reject_non_canonical(item)


def canonical_json_bytes(value: Any) -> bytes:
    """
    Canonical JSON: UTF-8, sorted keys, no whitespace, no floats or NaN.

    Amounts stay exact because Python ints are encoded as JSON integers.
    """
    _reject_non_canonical(value)
    text = json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return text.encode("utf-8")


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_sep_bytes(label: str, version: int = 1) -> bytes:
    """
    ASCII, NUL-terminated domain prefix: b"simpleswap:<label>:v<version>\\x00".
    """
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if "\x00" in label:
        raise ValueError("label must not contain NUL")
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    return b"simpleswap:" + label.encode("ascii") + b":v" + str(version).encode("ascii") + b"\x00"
