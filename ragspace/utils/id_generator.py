"""ID generation utilities."""

import uuid


def generate_id(prefix: str = "", length: int = 8) -> str:
    """Generate a short, readable identifier.

    Format: {prefix}_{hex} or just {hex}
    Example: 3f9a1c0b

    Short ids can collide; callers persist them with create-if-absent.
    """
    short = uuid.uuid4().hex[:length]
    if prefix:
        return f"{prefix}_{short}"
    return short
