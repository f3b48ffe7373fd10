"""Request validation performed before any node call."""

from __future__ import annotations

import re
from typing import Iterable

from ..errors import WalletValidationError
from ..node.codec import normalize_address
from ..node.models import Address, TransferType

MAX_PAGE_SIZE = 100
MAX_ADDRESSES = 100

_HEX_RE = re.compile(r"^(0x)?[0-9a-fA-F]+$")


def validate_page_request(page_number: int, page_size: int, *, max_page_size: int = MAX_PAGE_SIZE) -> None:
    if page_number < 0:
        raise WalletValidationError("Invalid page number (min 0).")
    if page_size < 1 or page_size > max_page_size:
        raise WalletValidationError(f"Invalid page size (min 1, max {max_page_size}).")


def parse_addresses(
    values: Iterable[str] | None,
    *,
    field: str = "addresses",
    required: bool = True,
    limit: int = MAX_ADDRESSES,
) -> frozenset[Address]:
    """Normalise and de-duplicate addresses.

    Comma separated entries are accepted so ``?addresses=a,b`` and
    ``?addresses=a&addresses=b`` mean the same thing.
    """

    parsed: set[Address] = set()
    invalid: list[str] = []
    for value in values or ():
        for chunk in str(value).split(","):
            token = chunk.strip()
            if not token:
                continue
            try:
                parsed.add(normalize_address(token))
            except ValueError:
                invalid.append(token)
    if invalid:
        raise WalletValidationError(f"Invalid {field}.", details={field: invalid})
    if required and not parsed:
        raise WalletValidationError(f"At least one entry is required in {field}.")
    if len(parsed) > limit:
        raise WalletValidationError(f"Too many {field} (max {limit}).")
    return frozenset(parsed)


def parse_address(value: str | None, *, field: str = "address") -> Address:
    if value is None or not str(value).strip():
        raise WalletValidationError(f"Missing {field}.")
    try:
        return normalize_address(value)
    except ValueError as exc:
        raise WalletValidationError(f"Invalid {field}.", details={field: value}) from exc


def parse_transfer_type(value: str | None) -> TransferType | None:
    if value is None or not str(value).strip():
        return None
    try:
        return TransferType(str(value).strip().upper())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in TransferType)
        raise WalletValidationError(f"Invalid transfer type (one of {allowed}).") from exc


def validate_hex_data(value: str | None) -> str:
    text = (value or "").strip()
    if not text:
        raise WalletValidationError("Value cannot be null or empty.")
    if not _HEX_RE.match(text):
        raise WalletValidationError("Transaction data must be hex encoded.")
    digits = text[2:] if text[:2] in {"0x", "0X"} else text
    if len(digits) % 2:
        raise WalletValidationError("Transaction data must have an even number of hex digits.")
    return text


__all__ = [
    "MAX_PAGE_SIZE",
    "MAX_ADDRESSES",
    "validate_page_request",
    "parse_addresses",
    "parse_address",
    "parse_transfer_type",
    "validate_hex_data",
]
