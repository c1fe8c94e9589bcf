"""Shared fixtures for sshbox tests."""

from __future__ import annotations

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from sshbox.crypto.keys import parse_private_key, parse_public_key
from sshbox.types import PrivateKeyMaterial, PublicKeyMaterial


def ssh_string(data: bytes) -> bytes:
    """Encode a field the way the SSH wire format does."""
    return len(data).to_bytes(4, "big") + data


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    """A 2048-bit RSA key shared by the whole test session."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_key() -> rsa.RSAPrivateKey:
    """A second, unrelated 2048-bit RSA key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def public_line(key: rsa.RSAPrivateKey, comment: bytes = b"test@sshbox") -> bytes:
    line = key.public_key().public_bytes(
        serialization.Encoding.OpenSSH, serialization.PublicFormat.OpenSSH
    )
    return line + b" " + comment + b"\n"


def pkcs1_pem(key: rsa.RSAPrivateKey) -> bytes:
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    )


@pytest.fixture(scope="session")
def public_key_line(rsa_key: rsa.RSAPrivateKey) -> bytes:
    """The session key as an ``ssh-rsa AAAA... comment`` line."""
    return public_line(rsa_key)


@pytest.fixture(scope="session")
def private_key_pem(rsa_key: rsa.RSAPrivateKey) -> bytes:
    """The session key as a PKCS#1 ``RSA PRIVATE KEY`` block."""
    return pkcs1_pem(rsa_key)


@pytest.fixture(scope="session")
def pub(public_key_line: bytes) -> PublicKeyMaterial:
    return parse_public_key(public_key_line)


@pytest.fixture(scope="session")
def priv(private_key_pem: bytes) -> PrivateKeyMaterial:
    return parse_private_key(private_key_pem)


@pytest.fixture(scope="session")
def other_priv(other_rsa_key: rsa.RSAPrivateKey) -> PrivateKeyMaterial:
    return parse_private_key(pkcs1_pem(other_rsa_key))
