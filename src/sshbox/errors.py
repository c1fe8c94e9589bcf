"""Error hierarchy for sshbox."""

from __future__ import annotations


class SSHBoxError(Exception):
    """Base exception for all sshbox errors."""

    pass


class InvalidKeyFormatError(SSHBoxError):
    """Malformed key blob, wrong envelope type, or invalid inner encoding."""

    pass


class UnsupportedAlgorithmError(SSHBoxError):
    """Public key declares an algorithm other than ssh-rsa.

    Attributes:
        algorithm: The algorithm name found in the key.
    """

    def __init__(self, algorithm: str) -> None:
        self.algorithm = algorithm
        super().__init__(f"Unsupported key algorithm: {algorithm!r}, expected 'ssh-rsa'")


class KeyGenerationError(SSHBoxError):
    """The secure random source was unavailable."""

    pass


class EncryptionError(SSHBoxError):
    """The symmetric key could not be wrapped under the public key."""

    pass


class InvalidKeyError(SSHBoxError):
    """The locked key could not be unwrapped with the private key."""

    pass


class AuthenticationError(SSHBoxError):
    """The box failed its integrity check.

    CRITICAL: This error indicates tampering or a wrong key. The plaintext
    is never returned when it is raised.
    """

    pass


class InvalidContainerError(SSHBoxError):
    """Data is neither a binary nor an armored sealed container.

    Attributes:
        reasons: Failure reason of each decode attempt, in order.
    """

    def __init__(self, message: str, reasons: tuple[str, ...] = ()) -> None:
        self.reasons = reasons
        super().__init__(message)


class KeySourceError(SSHBoxError):
    """Key material could not be retrieved from a file or URL."""

    pass


class FileAccessError(SSHBoxError):
    """Source file could not be read or target file could not be written."""

    pass


class InputTooLargeError(SSHBoxError):
    """Input exceeds the configured size limit."""

    pass
