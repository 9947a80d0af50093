"""
ID generation for normalization strings.

Normalization strings are opaque lookup keys; callers that index them in
Parquet or a database usually want a fixed-width integer instead:
- normalization_id: xxh3_64(normalization_string_bytes) as signed int64
- key prefix: first N hex chars of the same hash, for bucketing
"""

import xxhash


def get_normalization_id(normalization_string: str) -> int:
    """
    Generate a normalization ID using xxh3_64 hash.

    Args:
        normalization_string: Output of URLNormalizer.compute_normalization_string

    Returns:
        64-bit hash as signed int64 (for Parquet compatibility)
    """
    # xxhash returns unsigned, we'll store as signed int64
    hash_val = xxhash.xxh3_64(normalization_string.encode("utf-8")).intdigest()
    # Convert to signed int64 range
    if hash_val >= 2**63:
        hash_val -= 2**64
    return hash_val


def get_key_prefix(normalization_string: str, prefix_chars: int = 2) -> str:
    """
    Get key prefix for bucketing (first N hex chars of the key hash).

    Args:
        normalization_string: Output of URLNormalizer.compute_normalization_string
        prefix_chars: Number of hex characters to use (default: 2)

    Returns:
        Hex prefix string (e.g., 'a7', '3f')
    """
    if not 0 < prefix_chars <= 16:
        raise ValueError(f"prefix_chars must be between 1 and 16, got {prefix_chars}")
    hash_val = xxhash.xxh3_64(normalization_string.encode("utf-8")).intdigest()
    return f"{hash_val:016x}"[:prefix_chars]
