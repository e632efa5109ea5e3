"""Hash utilities for the governance audit chain.

This module provides deterministic hashing functions for the session and
vote audit chain. Entries are hash-chained using SHA-256 so that any
insertion, deletion, reordering, or mutation of vote history changes the
head of the chain.

Chaining rules:
- The first entry links to GENESIS_HASH (64 zeros)
- A session entry hashes its canonical payload alone
- A vote entry hashes canonical(payload) concatenated with the previous hash
"""

from __future__ import annotations

import hashlib
import json
import math
import unicodedata
from datetime import datetime
from enum import Enum
from typing import Any

# Genesis hash: 64 zeros representing "no previous entry"
GENESIS_HASH: str = "0" * 64

# Hash algorithm version
# Version 1 = SHA-256
HASH_ALG_VERSION: int = 1
HASH_ALG_NAME: str = "SHA-256"


def _sanitize_for_json(data: Any) -> Any:
    """Recursively sanitize data for deterministic JSON serialization.

    This function:
    - Normalizes Unicode strings using NFKC form
    - Renders datetimes as ISO 8601 strings and enums as their values
    - Rejects NaN, Infinity, and -Infinity float values
    - Recursively processes nested structures

    Args:
        data: Any JSON-serializable data.

    Returns:
        Sanitized data safe for deterministic JSON serialization.

    Raises:
        ValueError: If data contains NaN, Infinity, or -Infinity values.
    """
    if isinstance(data, str):
        return unicodedata.normalize("NFKC", data)
    elif isinstance(data, Enum):
        return _sanitize_for_json(data.value)
    elif isinstance(data, datetime):
        return data.isoformat()
    elif isinstance(data, float):
        if math.isnan(data) or math.isinf(data):
            raise ValueError(
                f"Cannot serialize non-finite float value: {data!r}. "
                "NaN and Infinity are not valid JSON."
            )
        return data
    elif isinstance(data, dict):
        return {_sanitize_for_json(k): _sanitize_for_json(v) for k, v in data.items()}
    elif isinstance(data, (list, tuple)):
        return [_sanitize_for_json(item) for item in data]
    else:
        return data


def canonical_json(data: Any) -> str:
    """Produce deterministic JSON representation for hashing.

    The output is sorted by key (recursively), compact, does not escape
    non-ASCII characters, and is NFKC-normalized.

    Args:
        data: Any JSON-serializable data (dict, list, str, number, bool, None)

    Returns:
        Canonical JSON string suitable for hashing.

    Raises:
        ValueError: If data contains NaN, Infinity, or -Infinity values.

    Example:
        >>> canonical_json({"b": 1, "a": 2})
        '{"a":2,"b":1}'
    """
    sanitized = _sanitize_for_json(data)

    return json.dumps(
        sanitized,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def compute_chain_hash(payload: dict[str, Any], previous_hash: str | None = None) -> str:
    """Compute the SHA-256 hash of an audit chain entry.

    Args:
        payload: The entry payload (session or vote fields).
        previous_hash: Hash of the preceding entry. None hashes the payload
            alone, which is how session entries are sealed.

    Returns:
        Lowercase hexadecimal SHA-256 hash (64 characters).

    Example:
        >>> len(compute_chain_hash({"vote_id": "v1"}, GENESIS_HASH))
        64
    """
    material = canonical_json(payload)
    if previous_hash is not None:
        material += previous_hash
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


def is_valid_sha256_hex(value: str) -> bool:
    """Check if a string is a valid SHA-256 hexadecimal hash.

    Args:
        value: The string to validate.

    Returns:
        True if the string is a valid 64-character lowercase hexadecimal string.
    """
    if len(value) != 64:
        return False
    try:
        int(value, 16)
        return value == value.lower()
    except ValueError:
        return False
