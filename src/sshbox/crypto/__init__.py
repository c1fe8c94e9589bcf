"""Cryptographic operations for sshbox."""

from .cipher import generate_symmetric_key, max_wrap_size, open_box, seal
from .constants import (
    BOX_OVERHEAD,
    CONTAINER_ARMOR_LABEL,
    SSH_RSA_ALGORITHM,
    SYMMETRIC_KEY_SIZE,
)
from .keys import PublicKeyLine, parse_private_key, parse_public_key, tokenize_public_key
from .utils import from_base64

__all__ = [
    "BOX_OVERHEAD",
    "CONTAINER_ARMOR_LABEL",
    "SSH_RSA_ALGORITHM",
    "SYMMETRIC_KEY_SIZE",
    "PublicKeyLine",
    "from_base64",
    "generate_symmetric_key",
    "max_wrap_size",
    "open_box",
    "parse_private_key",
    "parse_public_key",
    "seal",
    "tokenize_public_key",
]
