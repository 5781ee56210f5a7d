"""Base58Check address decoding and the resolvers used by the URI parser.

The Base58 routines follow the conventions of the DigiByte reference client:
a version byte followed by a 20-byte hash and a four byte double-SHA256
checksum. Resolvers turn address text into an :class:`Address` value for a
given :class:`~dgb_uri.network.NetworkParameters` or raise
:class:`AddressFormatError` with a human readable reason.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from .network import NetworkParameters
from .rpc_client import RPCError, RPCTransportError

logger = logging.getLogger(__name__)

b58_digits = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

HASH160_LENGTH = 20
CHECKSUM_LENGTH = 4


class AddressFormatError(ValueError):
    """Raised when address text cannot be resolved for a network."""


@dataclass(frozen=True)
class Address:
    """A validated address bound to the network it was resolved for."""

    network: NetworkParameters
    version: int
    hash160: bytes
    text: str

    def __str__(self) -> str:
        return self.text

    @property
    def is_p2sh(self) -> bool:
        return self.version != self.network.address_header


def _double_sha256(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def base58_encode(data: bytes) -> str:
    """Encode ``data`` with the Base58 alphabet, keeping leading zero bytes."""

    value = int.from_bytes(data, "big")
    output: list[str] = []
    while value > 0:
        value, remainder = divmod(value, 58)
        output.append(b58_digits[remainder])
    leading_zero_count = len(data) - len(data.lstrip(b"\x00"))
    return b58_digits[0] * leading_zero_count + "".join(reversed(output))


def base58_decode(value: str) -> bytes:
    """Decode a Base58 string into raw bytes."""

    number = 0
    for character in value:
        index = b58_digits.find(character)
        if index == -1:
            raise AddressFormatError(f"Invalid Base58 character: {character!r}")
        number = number * 58 + index

    padding = len(value) - len(value.lstrip(b58_digits[0]))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big")
    return b"\x00" * padding + body


def base58check_encode(version: int, payload: bytes) -> str:
    """Encode ``payload`` prefixed by ``version`` with a Base58Check checksum."""

    data = bytes([version]) + payload
    return base58_encode(data + _double_sha256(data)[:CHECKSUM_LENGTH])


def base58check_decode(value: str) -> tuple[int, bytes]:
    """Return ``(version, payload)`` after verifying the checksum of ``value``."""

    raw = base58_decode(value)
    if len(raw) < 1 + CHECKSUM_LENGTH:
        raise AddressFormatError("Input too short")
    data, checksum = raw[:-CHECKSUM_LENGTH], raw[-CHECKSUM_LENGTH:]
    if _double_sha256(data)[:CHECKSUM_LENGTH] != checksum:
        raise AddressFormatError("Checksum does not validate")
    return data[0], data[1:]


def encode_address(
    network: NetworkParameters, hash160: bytes, *, p2sh: bool = False
) -> str:
    """Return the Base58Check text for ``hash160`` on ``network``."""

    if len(hash160) != HASH160_LENGTH:
        raise ValueError("Addresses carry exactly 20 bytes of hash")
    version = network.p2sh_header if p2sh else network.address_header
    return base58check_encode(version, hash160)


class AddressResolver(Protocol):
    """Protocol describing how address text is resolved for a network."""

    def resolve(self, network: NetworkParameters, text: str) -> Address:
        """Return an :class:`Address` for ``text`` or raise AddressFormatError."""


class Base58AddressResolver:
    """Offline resolver for legacy Base58Check DigiByte addresses."""

    def resolve(self, network: NetworkParameters, text: str) -> Address:
        version, payload = base58check_decode(text)
        if len(payload) != HASH160_LENGTH:
            raise AddressFormatError(
                f"Expected {HASH160_LENGTH} bytes of hash, got {len(payload)}"
            )
        if not network.accepts_version(version):
            raise AddressFormatError(
                f"Version code of address did not match acceptable versions for network "
                f"{network.name}: {version} not in {list(network.acceptable_address_codes)}"
            )
        return Address(network=network, version=version, hash160=payload, text=text)


class NodeAddressResolver:
    """Resolver that asks a DigiByte node to confirm an address first.

    The node's ``validateaddress`` verdict gates acceptance; the opaque
    :class:`Address` value is then produced by ``fallback`` (the offline
    Base58 resolver by default) so callers get the same value either way.
    """

    def __init__(self, rpc: Any, fallback: AddressResolver | None = None) -> None:
        self.rpc = rpc
        self.fallback = fallback or Base58AddressResolver()

    def resolve(self, network: NetworkParameters, text: str) -> Address:
        try:
            info = self.rpc.validateaddress(text)
        except (RPCError, RPCTransportError) as exc:
            logger.error("validateaddress failed: %s", exc)
            raise AddressFormatError(f"node could not validate address: {exc}") from exc
        if not isinstance(info, dict) or not info.get("isvalid"):
            raise AddressFormatError("node reports the address as invalid")
        return self.fallback.resolve(network, text)


DEFAULT_RESOLVER = Base58AddressResolver()
