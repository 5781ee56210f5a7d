"""Parse and build ``digibyte:`` payment request URIs.

URIs take the form ``digibyte:<address>[?<key>=<value>[&<key>=<value>...]]``.
Text reaching :func:`parse_payment_uri` usually comes from QR codes, the
clipboard or deep links, so every step of the pipeline is strict and the first
failure rejects the whole URI. Recognised parameters are ``amount`` (decimal
DGB), ``label`` and ``message``; ``address`` is refused outright because the
address is already bound by the path. Unknown parameters are kept verbatim
unless they carry the ``req-`` prefix, which marks them as mandatory to
understand.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from .address import DEFAULT_RESOLVER, Address, AddressFormatError, AddressResolver
from .amounts import InvalidAmountError, format_plain, parse_decimal
from .encoding import (
    decode_field,
    encode_field,
    is_valid_path_segment,
    is_valid_query_key,
    is_valid_uri_text,
)
from .errors import ParseFailure, ParseResult, ParseSuccess, PaymentURIError, URIErrorKind
from .network import URI_SCHEME, NetworkParameters

logger = logging.getLogger(__name__)

REQUIRED_PREFIX = "req-"

# req- parameters this library understands; anything else with the prefix is rejected.
RECOGNIZED_REQUIRED_FIELDS: frozenset[str] = frozenset()


class QueryField(str, Enum):
    """Query parameters with a fixed meaning."""

    ADDRESS = "address"
    AMOUNT = "amount"
    LABEL = "label"
    MESSAGE = "message"


_QUERY_FIELDS = {member.value: member for member in QueryField}


@dataclass(frozen=True)
class PaymentRequest:
    """Immutable payment instruction decoded from (or destined for) a URI."""

    address: Address
    amount: int | None = None
    label: str | None = None
    message: str | None = None
    extra_parameters: Mapping[str, str] = field(
        default_factory=dict, hash=False
    )

    def __post_init__(self) -> None:
        if self.address is None:
            raise ValueError("A payment request requires an address")
        if self.amount is not None and self.amount < 0:
            raise ValueError("Amount must be positive")
        # Empty display strings mean "absent".
        if self.label == "":
            object.__setattr__(self, "label", None)
        if self.message == "":
            object.__setattr__(self, "message", None)
        extras = dict(self.extra_parameters)
        if QueryField.ADDRESS.value in extras:
            raise ValueError("extra_parameters cannot contain 'address'")
        object.__setattr__(self, "extra_parameters", MappingProxyType(extras))

    @classmethod
    def from_uri(
        cls,
        text: str,
        network: NetworkParameters,
        *,
        resolver: AddressResolver | None = None,
    ) -> "PaymentRequest":
        """Parse ``text`` and raise :class:`PaymentURIError` on failure."""

        return parse_payment_uri(text, network, resolver=resolver).unwrap()

    def get_parameter(self, name: str) -> str | int | None:
        """Return the value of parameter ``name`` or ``None`` when absent."""

        known = _QUERY_FIELDS.get(name)
        if known is QueryField.ADDRESS:
            return str(self.address)
        if known is QueryField.AMOUNT:
            return self.amount
        if known is QueryField.LABEL:
            return self.label
        if known is QueryField.MESSAGE:
            return self.message
        return self.extra_parameters.get(name)

    def to_uri(self) -> str:
        return build_payment_uri(
            self.address,
            self.amount,
            self.label,
            self.message,
            extra_parameters=self.extra_parameters,
        )

    def __str__(self) -> str:
        parts = [f"'address'='{self.address}'"]
        if self.amount is not None:
            parts.append(f"'amount'='{self.amount}'")
        if self.label is not None:
            parts.append(f"'label'='{self.label}'")
        if self.message is not None:
            parts.append(f"'message'='{self.message}'")
        parts.extend(f"'{key}'='{value}'" for key, value in self.extra_parameters.items())
        return f"PaymentRequest[{','.join(parts)}]"


def parse_payment_uri(
    text: str,
    network: NetworkParameters,
    *,
    resolver: AddressResolver | None = None,
) -> ParseResult:
    """Parse ``text`` into a :class:`ParseSuccess` or :class:`ParseFailure`.

    ``network`` selects the URI scheme and the address rules; ``resolver``
    defaults to the offline Base58 resolver.
    """

    try:
        request = _parse(text, network, resolver or DEFAULT_RESOLVER)
    except PaymentURIError as exc:
        logger.debug("Rejected payment URI (%s): %s", exc.kind.value, exc)
        return ParseFailure(exc)
    return ParseSuccess(request)


def _parse(text: str, network: NetworkParameters, resolver: AddressResolver) -> PaymentRequest:
    if not is_valid_uri_text(text):
        raise PaymentURIError(
            URIErrorKind.BAD_SYNTAX, "Bad URI syntax: illegal character in payment URI"
        )

    scheme, colon, remainder = text.partition(":")
    if not colon and scheme == network.uri_scheme:
        raise PaymentURIError(URIErrorKind.MISSING_ADDRESS, "Missing address")
    if not colon or scheme != network.uri_scheme:
        raise PaymentURIError(
            URIErrorKind.SCHEME_MISMATCH,
            f"Bad scheme: expected '{network.uri_scheme}:'",
        )

    # Some wallets emit "digibyte://ADDRESS"; the slashes carry no meaning.
    if remainder.startswith("//"):
        remainder = remainder[2:]

    segments = remainder.split("?")
    if len(segments) > 2:
        raise PaymentURIError(
            URIErrorKind.TOO_MANY_QUESTION_MARKS, "Too many question marks in payment URI"
        )
    address_text = segments[0]
    query = segments[1] if len(segments) == 2 else ""

    if not address_text:
        raise PaymentURIError(URIErrorKind.MISSING_ADDRESS, "Missing address", field="address")
    if not is_valid_path_segment(address_text):
        raise PaymentURIError(
            URIErrorKind.BAD_SYNTAX,
            "Bad URI syntax: illegal character in address",
            field="address",
        )
    try:
        address = resolver.resolve(network, address_text)
    except AddressFormatError as exc:
        raise PaymentURIError(
            URIErrorKind.BAD_ADDRESS, f"Bad address: {exc}", field="address"
        ) from exc

    amount: int | None = None
    label: str | None = None
    message: str | None = None
    extras: dict[str, str] = {}
    seen: set[str] = set()

    for key, value in _query_pairs(query):
        known = _QUERY_FIELDS.get(key)
        if known is QueryField.ADDRESS:
            raise PaymentURIError(
                URIErrorKind.DUPLICATE_ADDRESS_FIELD,
                "'address' cannot appear in the query of a payment URI",
                field=key,
            )
        if known is QueryField.AMOUNT:
            parsed_amount = _parse_amount(value)
        elif known is QueryField.LABEL or known is QueryField.MESSAGE:
            if not value:
                raise PaymentURIError(
                    URIErrorKind.EMPTY_FIELD_VALUE, f"'{key}' cannot be empty", field=key
                )
        elif key.startswith(REQUIRED_PREFIX) and key not in RECOGNIZED_REQUIRED_FIELDS:
            raise PaymentURIError(
                URIErrorKind.UNRECOGNIZED_REQUIRED_FIELD,
                f"Unrecognised required field '{key}'",
                field=key,
            )

        # Every occurrence is validated above; only the first one is kept.
        if key in seen:
            logger.warning("Ignoring repeated '%s' parameter in payment URI", key)
            continue
        seen.add(key)

        if known is QueryField.AMOUNT:
            amount = parsed_amount
        elif known is QueryField.LABEL:
            label = value
        elif known is QueryField.MESSAGE:
            message = value
        else:
            extras[key] = value

    return PaymentRequest(
        address=address,
        amount=amount,
        label=label,
        message=message,
        extra_parameters=extras,
    )


def _query_pairs(query: str) -> list[tuple[str, str]]:
    if not query:
        return []
    pairs: list[tuple[str, str]] = []
    for token in query.split("&"):
        pieces = token.split("=")
        if len(pieces) != 2 or not pieces[0]:
            raise PaymentURIError(
                URIErrorKind.MALFORMED_PAIR,
                f"Malformed payment URI, cannot parse name value pair '{token}'",
            )
        key, raw_value = pieces
        try:
            value = decode_field(raw_value)
        except UnicodeDecodeError as exc:
            raise PaymentURIError(
                URIErrorKind.BAD_SYNTAX,
                f"Bad URI syntax: '{key}' is not valid UTF-8",
                field=key,
            ) from exc
        pairs.append((key, value))
    return pairs


def _parse_amount(value: str) -> int:
    name = QueryField.AMOUNT.value
    if not value:
        raise PaymentURIError(URIErrorKind.INVALID_AMOUNT, "'amount' cannot be empty", field=name)
    try:
        amount = parse_decimal(value)
    except InvalidAmountError as exc:
        raise PaymentURIError(
            URIErrorKind.INVALID_AMOUNT, f"'amount' is not a valid amount: {exc}", field=name
        ) from exc
    if amount < 0:
        raise PaymentURIError(
            URIErrorKind.INVALID_AMOUNT, "'amount' cannot be negative", field=name
        )
    return amount


def build_payment_uri(
    address: Address | str,
    amount: int | None = None,
    label: str | None = None,
    message: str | None = None,
    *,
    scheme: str | None = None,
    extra_parameters: Mapping[str, str] | None = None,
) -> str:
    """Return the canonical URI for a payment to ``address``.

    Parameters are emitted in the fixed order ``amount``, ``label``,
    ``message`` followed by any extra parameters in insertion order. ``None``
    and empty strings are omitted; a negative amount raises ``ValueError``.

    Extra keys are written verbatim, exactly as :func:`parse_payment_uri`
    reports them, so a key that could not be read back (empty, containing
    ``&``, ``=`` or other characters illegal in a query, or an unknown
    ``req-`` key) raises ``ValueError``.
    """

    if amount is not None and amount < 0:
        raise ValueError("Amount must be positive")
    if scheme is None:
        scheme = address.network.uri_scheme if isinstance(address, Address) else URI_SCHEME

    params: list[str] = []
    if amount is not None:
        params.append(f"{QueryField.AMOUNT.value}={format_plain(amount)}")
    if label:
        params.append(f"{QueryField.LABEL.value}={encode_field(label)}")
    if message:
        params.append(f"{QueryField.MESSAGE.value}={encode_field(message)}")
    for key, value in (extra_parameters or {}).items():
        if key in _QUERY_FIELDS:
            raise ValueError(f"'{key}' cannot be passed as an extra parameter")
        if not isinstance(key, str) or not is_valid_query_key(key):
            raise ValueError(f"illegal key for payment URI: {key!r}")
        if key.startswith(REQUIRED_PREFIX) and key not in RECOGNIZED_REQUIRED_FIELDS:
            raise ValueError(f"Unrecognised required field '{key}'")
        params.append(f"{key}={encode_field(value)}")

    uri = f"{scheme}:{address}"
    if params:
        uri += "?" + "&".join(params)
    return uri
