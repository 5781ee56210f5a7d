"""Failure kinds and the tagged result returned by the payment URI parser."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .uri import PaymentRequest


class URIErrorKind(str, Enum):
    """Every way a payment URI can be rejected."""

    SCHEME_MISMATCH = "scheme_mismatch"
    BAD_SYNTAX = "bad_syntax"
    MISSING_ADDRESS = "missing_address"
    BAD_ADDRESS = "bad_address"
    TOO_MANY_QUESTION_MARKS = "too_many_question_marks"
    MALFORMED_PAIR = "malformed_pair"
    DUPLICATE_ADDRESS_FIELD = "duplicate_address_field"
    INVALID_AMOUNT = "invalid_amount"
    EMPTY_FIELD_VALUE = "empty_field_value"
    UNRECOGNIZED_REQUIRED_FIELD = "unrecognized_required_field"


class PaymentURIError(ValueError):
    """Raised (or carried by :class:`ParseFailure`) when a URI is rejected.

    ``field`` names the query parameter at fault when there is one, so user
    interfaces can point at the offending input.
    """

    def __init__(self, kind: URIErrorKind, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.field = field


@dataclass(frozen=True)
class ParseSuccess:
    request: "PaymentRequest"

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> "PaymentRequest":
        return self.request


@dataclass(frozen=True)
class ParseFailure:
    error: PaymentURIError

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> URIErrorKind:
        return self.error.kind

    def unwrap(self) -> "PaymentRequest":
        raise self.error


ParseResult = Union[ParseSuccess, ParseFailure]
