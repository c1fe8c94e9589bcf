"""PEM-style text armor for sshbox.

An armored block is a ``-----BEGIN <label>-----`` line, optional
``Key: value`` header lines, the base64 body and a matching
``-----END <label>-----`` line. Both key files and containers use it.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field

from .constants import DEFAULT_ARMOR_WIDTH

_BEGIN_PREFIX = "-----BEGIN "
_END_PREFIX = "-----END "
_MARKER_SUFFIX = "-----"


@dataclass(frozen=True)
class ArmorBlock:
    """A decoded armor envelope.

    Attributes:
        label: The label carried by the begin and end markers.
        headers: Header lines found between the begin marker and the body.
        payload: The base64-decoded body.
    """

    label: str
    headers: dict[str, str] = field(default_factory=dict)
    payload: bytes = b""


def _marker_label(line: str, prefix: str) -> str | None:
    """Return the label of a begin/end marker line, or None if it is not one."""
    if not line.startswith(prefix) or not line.endswith(_MARKER_SUFFIX):
        return None
    label = line[len(prefix) : -len(_MARKER_SUFFIX)]
    return label or None


def encode_armor(label: str, data: bytes, width: int = DEFAULT_ARMOR_WIDTH) -> bytes:
    """Wrap binary data in an armor envelope.

    Args:
        label: Label for the begin and end markers.
        data: The bytes to armor.
        width: Column width of the base64 body.

    Returns:
        The armored block as ASCII bytes, ending with a newline.
    """
    if width <= 0:
        raise ValueError(f"Armor width must be positive, got {width}")

    body = base64.b64encode(data).decode("ascii")
    lines = [f"{_BEGIN_PREFIX}{label}{_MARKER_SUFFIX}"]
    lines.extend(body[i : i + width] for i in range(0, len(body), width))
    lines.append(f"{_END_PREFIX}{label}{_MARKER_SUFFIX}")
    return ("\n".join(lines) + "\n").encode("ascii")


def decode_armor(data: bytes | str) -> ArmorBlock | None:
    """Find and decode the first armor envelope in data.

    Text before the begin marker and after the end marker is ignored.

    Args:
        data: Raw bytes or text that may contain an armored block.

    Returns:
        The decoded block, or None if no well-formed envelope is present.
    """
    if isinstance(data, bytes):
        # Undecodable bytes can only appear outside a valid envelope.
        text = data.decode("ascii", errors="replace")
    else:
        text = data

    lines = [line.strip() for line in text.splitlines()]

    start = None
    label = None
    for index, line in enumerate(lines):
        label = _marker_label(line, _BEGIN_PREFIX)
        if label is not None:
            start = index
            break
    if start is None or label is None:
        return None

    headers: dict[str, str] = {}
    body: list[str] = []
    in_headers = True
    for line in lines[start + 1 :]:
        end_label = _marker_label(line, _END_PREFIX)
        if end_label is not None:
            if end_label != label:
                return None
            try:
                payload = base64.b64decode("".join(body), validate=True)
            except ValueError:
                return None
            return ArmorBlock(label=label, headers=headers, payload=payload)

        if in_headers and ":" in line:
            key, _, value = line.partition(":")
            headers[key.strip()] = value.strip()
            continue
        in_headers = False
        if line:
            body.append(line)

    # No end marker
    return None
