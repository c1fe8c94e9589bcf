"""Base64 decoding utilities for sshbox."""

import base64


def from_base64(s: str | bytes) -> bytes:
    """Decode a standard base64 string to bytes.

    Unlike ``base64.b64decode`` with default arguments, characters outside
    the base64 alphabet are rejected instead of silently discarded.

    Args:
        s: The base64 string to decode.

    Returns:
        The decoded bytes.

    Raises:
        ValueError: If the input is not valid base64.
    """
    try:
        return base64.b64decode(s, validate=True)
    except ValueError as e:
        raise ValueError(f"Invalid base64 data: {e}") from e
