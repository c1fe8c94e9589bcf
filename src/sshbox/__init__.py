"""sshbox.

Encrypt files to SSH RSA public keys. A fresh AES-256-GCM key protects the
file contents and is itself wrapped with RSA-OAEP (SHA-256) under the
recipient's key. The result is a DER record, optionally armored as text.

Example:
    ```python
    from sshbox import decode_container, encode_container, open_box, seal
    from sshbox import parse_private_key, parse_public_key

    pub = parse_public_key(open("id_rsa.pub", "rb").read())
    package = encode_container(seal(b"hello world", pub), armor=True)

    priv = parse_private_key(open("id_rsa", "rb").read())
    message = open_box(decode_container(package), priv)
    ```
"""

from .armor import ArmorBlock, decode_armor, encode_armor
from .constants import (
    DEFAULT_ARMOR_WIDTH,
    DEFAULT_MAX_KEY_SIZE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY_MS,
    DEFAULT_RETRY_STATUS_CODES,
    DEFAULT_TIMEOUT_MS,
)
from .container import DecodeAttempt, decode_container, encode_container
from .crypto import open_box, parse_private_key, parse_public_key, seal
from .errors import (
    AuthenticationError,
    EncryptionError,
    FileAccessError,
    InputTooLargeError,
    InvalidContainerError,
    InvalidKeyError,
    InvalidKeyFormatError,
    KeyGenerationError,
    KeySourceError,
    SSHBoxError,
    UnsupportedAlgorithmError,
)
from .keysource import KeyFetcher, fetch_key, is_remote, load_private_key, load_public_key
from .pipeline import decrypt_bytes, decrypt_file, encrypt_bytes, encrypt_file
from .types import (
    PrivateKeyMaterial,
    PublicKeyMaterial,
    SealedContainer,
    SSHBoxConfig,
    SymmetricKey,
)

__version__ = "0.1.0"

__all__ = [
    # Core operations
    "parse_public_key",
    "parse_private_key",
    "seal",
    "open_box",
    "encode_container",
    "decode_container",
    "DecodeAttempt",
    # Armor
    "ArmorBlock",
    "decode_armor",
    "encode_armor",
    # Key sources
    "KeyFetcher",
    "fetch_key",
    "is_remote",
    "load_private_key",
    "load_public_key",
    # File pipeline
    "decrypt_bytes",
    "decrypt_file",
    "encrypt_bytes",
    "encrypt_file",
    # Constants
    "DEFAULT_ARMOR_WIDTH",
    "DEFAULT_MAX_KEY_SIZE",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_RETRY_DELAY_MS",
    "DEFAULT_RETRY_STATUS_CODES",
    "DEFAULT_TIMEOUT_MS",
    # Data types
    "PrivateKeyMaterial",
    "PublicKeyMaterial",
    "SealedContainer",
    "SSHBoxConfig",
    "SymmetricKey",
    # Errors
    "SSHBoxError",
    "AuthenticationError",
    "EncryptionError",
    "FileAccessError",
    "InputTooLargeError",
    "InvalidContainerError",
    "InvalidKeyError",
    "InvalidKeyFormatError",
    "KeyGenerationError",
    "KeySourceError",
    "UnsupportedAlgorithmError",
    # Version
    "__version__",
]
