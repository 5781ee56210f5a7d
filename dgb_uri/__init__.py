"""DigiByte payment request URIs and exact amount handling."""

from .address import (
    Address,
    AddressFormatError,
    AddressResolver,
    Base58AddressResolver,
    NodeAddressResolver,
    encode_address,
)
from .amounts import (
    CENT,
    COIN,
    InvalidAmountError,
    combine,
    format_friendly,
    format_plain,
    parse_decimal,
)
from .encoding import decode_field, encode_field
from .errors import ParseFailure, ParseResult, ParseSuccess, PaymentURIError, URIErrorKind
from .network import MAINNET, TESTNET, NetworkParameters, network_from_id, network_from_name
from .uri import PaymentRequest, QueryField, build_payment_uri, parse_payment_uri

__all__ = [
    "Address",
    "AddressFormatError",
    "AddressResolver",
    "Base58AddressResolver",
    "NodeAddressResolver",
    "encode_address",
    "CENT",
    "COIN",
    "InvalidAmountError",
    "combine",
    "format_friendly",
    "format_plain",
    "parse_decimal",
    "decode_field",
    "encode_field",
    "ParseFailure",
    "ParseResult",
    "ParseSuccess",
    "PaymentURIError",
    "URIErrorKind",
    "MAINNET",
    "TESTNET",
    "NetworkParameters",
    "network_from_id",
    "network_from_name",
    "PaymentRequest",
    "QueryField",
    "build_payment_uri",
    "parse_payment_uri",
]
