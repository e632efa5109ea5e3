"""Audit chain hashing primitives."""

from src.domain.events.hash_utils import (
    GENESIS_HASH,
    HASH_ALG_NAME,
    HASH_ALG_VERSION,
    canonical_json,
    compute_chain_hash,
    is_valid_sha256_hex,
)

__all__: list[str] = [
    "GENESIS_HASH",
    "HASH_ALG_NAME",
    "HASH_ALG_VERSION",
    "canonical_json",
    "compute_chain_hash",
    "is_valid_sha256_hex",
]
