"""Tests for container.py module."""

from __future__ import annotations

import base64
import random

import pytest

from sshbox.armor import encode_armor
from sshbox.container import DecodeAttempt, decode_container, encode_container
from sshbox.crypto.cipher import seal
from sshbox.errors import InvalidContainerError
from sshbox.types import PublicKeyMaterial, SealedContainer

BEGIN = b"-----BEGIN SSHBOX ENCRYPTED FILE-----"
END = b"-----END SSHBOX ENCRYPTED FILE-----"


@pytest.fixture
def container(pub: PublicKeyMaterial) -> SealedContainer:
    """A real sealed container."""
    return seal(b"hello world", pub)


class TestEncode:
    """Tests for container encoding."""

    def test_der_short_form(self) -> None:
        """Test the exact DER bytes of a small container."""
        encoded = encode_container(SealedContainer(b"\x01\x02", b"abc"))
        assert encoded == bytes.fromhex("3009" "04020102" "0403616263")

    def test_der_long_form(self, container: SealedContainer) -> None:
        """Test long-form lengths for a 256-byte locked key."""
        encoded = encode_container(container)
        # SEQUENCE of 260 + 41 bytes
        assert encoded[:4] == bytes.fromhex("3082012d")
        assert encoded[4:8] == bytes.fromhex("04820100")
        assert encoded[8 : 8 + 256] == container.locked_key
        assert encoded[264:266] == bytes.fromhex("0427")
        assert encoded[266:] == container.box

    def test_empty_fields(self) -> None:
        """Test that empty byte strings encode as zero-length fields."""
        assert encode_container(SealedContainer(b"", b"")) == bytes.fromhex("300404000400")

    def test_armored_markers(self, container: SealedContainer) -> None:
        """Test the begin and end markers of armored output."""
        armored = encode_container(container, armor=True)
        assert armored.startswith(BEGIN + b"\n")
        assert armored.rstrip().endswith(END)
        assert armored.endswith(b"\n")

    def test_armored_line_width(self, container: SealedContainer) -> None:
        """Test that the armored body wraps at 64 columns."""
        lines = encode_container(container, armor=True).splitlines()[1:-1]
        assert all(len(line) == 64 for line in lines[:-1])
        assert 0 < len(lines[-1]) <= 64

    def test_armored_custom_width(self, container: SealedContainer) -> None:
        """Test a non-default armor width."""
        lines = encode_container(container, armor=True, width=76).splitlines()[1:-1]
        assert len(lines[0]) == 76

    def test_armored_body_is_der(self, container: SealedContainer) -> None:
        """Test that the armored body is the base64 of the binary record."""
        lines = encode_container(container, armor=True).splitlines()[1:-1]
        assert base64.b64decode(b"".join(lines)) == encode_container(container)


class TestDecode:
    """Tests for format-detecting container decoding."""

    @pytest.mark.parametrize("armor", [False, True])
    def test_round_trip(self, container: SealedContainer, armor: bool) -> None:
        """Test that decoding recovers the encoded container in both formats."""
        assert decode_container(encode_container(container, armor=armor)) == container

    @pytest.mark.parametrize("armor", [False, True])
    def test_round_trip_empty_fields(self, armor: bool) -> None:
        """Test round trip of a container with empty fields."""
        empty = SealedContainer(b"", b"")
        assert decode_container(encode_container(empty, armor=armor)) == empty

    def test_armored_and_binary_agree(self, container: SealedContainer) -> None:
        """Test that both encodings of one container decode identically."""
        from_binary = decode_container(encode_container(container, armor=False))
        from_armor = decode_container(encode_container(container, armor=True))
        assert from_binary == from_armor
        assert from_armor.locked_key == container.locked_key
        assert from_armor.box == container.box

    def test_armored_with_surrounding_text(self, container: SealedContainer) -> None:
        """Test that text around the armored block is ignored."""
        data = b"Here is the file:\n\n" + encode_container(container, armor=True) + b"-- \nme\n"
        assert decode_container(data) == container

    def test_armored_crlf(self, container: SealedContainer) -> None:
        """Test armored input that went through a CRLF channel."""
        data = encode_container(container, armor=True).replace(b"\n", b"\r\n")
        assert decode_container(data) == container

    def test_accepts_bytearray(self, container: SealedContainer) -> None:
        """Test that mutable buffers are accepted."""
        assert decode_container(bytearray(encode_container(container))) == container

    def test_empty_input(self) -> None:
        """Test that empty input is rejected."""
        with pytest.raises(InvalidContainerError) as exc_info:
            decode_container(b"")
        assert len(exc_info.value.reasons) == 2
        assert exc_info.value.reasons[0].startswith("binary:")
        assert exc_info.value.reasons[1].startswith("armored:")

    def test_wrong_armor_label(self, container: SealedContainer) -> None:
        """Test that an armored block with another label is rejected."""
        data = encode_armor("SSHBOX SIGNED FILE", encode_container(container))
        with pytest.raises(InvalidContainerError, match="unexpected armor label"):
            decode_container(data)

    def test_armor_missing_end(self, container: SealedContainer) -> None:
        """Test that an armored block without end marker is rejected."""
        data = encode_container(container, armor=True).replace(END, b"")
        with pytest.raises(InvalidContainerError, match="no armored block found"):
            decode_container(data)

    def test_armor_body_not_der(self) -> None:
        """Test that an armored body that is not a container is rejected."""
        data = encode_armor("SSHBOX ENCRYPTED FILE", b"hello world")
        with pytest.raises(InvalidContainerError, match="armored body"):
            decode_container(data)

    @pytest.mark.parametrize(
        ("hex_record", "reason"),
        [
            ("3080" "04020102" "0403616263" "0000", "indefinite length"),
            ("308109" "04020102" "0403616263", "non-minimal length"),
            ("3009" "04020102" "0403616263" "00", "trailing bytes"),
            ("300a" "04020102" "0403616263", "only 9 remain"),
            ("3004" "04020102", "expected 2 fields, found 1"),
            ("300b" "04020102" "0403616263" "0400", "expected 2 fields, found 3"),
            ("3009" "02020102" "0403616263", "expected OCTET STRING"),
            ("3109" "04020102" "0403616263", "expected SEQUENCE"),
            ("3085ffffffffff", "length uses 5 octets"),
            ("30", "truncated length"),
        ],
    )
    def test_malformed_binary(self, hex_record: str, reason: str) -> None:
        """Test that malformed DER records are rejected with a reason."""
        with pytest.raises(InvalidContainerError) as exc_info:
            decode_container(bytes.fromhex(hex_record))
        assert reason in exc_info.value.reasons[0]

    def test_truncations_never_decode(self, container: SealedContainer) -> None:
        """Test that every proper prefix of a binary container is rejected."""
        encoded = encode_container(container)
        for length in range(len(encoded)):
            with pytest.raises(InvalidContainerError):
                decode_container(encoded[:length])

    def test_arbitrary_bytes_only_raise_invalid_container(self) -> None:
        """Test that arbitrary input either decodes or raises InvalidContainerError."""
        rng = random.Random(1234)
        prefixes = [b"", b"\x30", b"\x30\x82", b"-----BEGIN SSHBOX ENCRYPTED FILE-----\n"]
        for _ in range(500):
            data = rng.choice(prefixes) + rng.randbytes(rng.randrange(0, 200))
            try:
                result = decode_container(data)
            except InvalidContainerError:
                continue
            assert isinstance(result, SealedContainer)

    def test_mutated_armor_only_raises_invalid_container(self, container: SealedContainer) -> None:
        """Test that corrupting armored text never raises anything unexpected."""
        armored = encode_container(container, armor=True)
        rng = random.Random(99)
        for _ in range(200):
            mutated = bytearray(armored)
            mutated[rng.randrange(len(mutated))] = rng.randrange(256)
            try:
                decode_container(bytes(mutated))
            except InvalidContainerError:
                pass


class TestDecodeAttempt:
    """Tests for the DecodeAttempt result type."""

    def test_ok(self) -> None:
        """Test ok reflects whether a container is present."""
        assert DecodeAttempt("binary", container=SealedContainer(b"", b"")).ok is True
        assert DecodeAttempt("binary", error="bad").ok is False
