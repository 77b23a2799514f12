"""Context hashing for anchor pre-filtering."""

_MASK = 0xFFFFFFFF


def context_hash(text: str) -> int:
    """
    djb2 over UTF-16 code units, kept to an unsigned 32-bit integer.

    Order sensitive and deterministic across runs. Collisions are tolerated:
    the hash only pre-filters candidates, the scorer still compares text.

    Examples:
        >>> context_hash("")
        5381
        >>> context_hash("ab") != context_hash("ba")
        True
    """
    h = 5381
    data = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        h = ((h << 5) + h + (data[i] | data[i + 1] << 8)) & _MASK
    return h


def format_hash(value: int) -> str:
    """Lowercase hex form, as stored by older project files."""
    return format(value, "x")


def parse_hash(value: int | str) -> int:
    if isinstance(value, int):
        return value & _MASK
    return int(value, 16) & _MASK
