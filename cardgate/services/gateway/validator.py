"""Business validation for incoming card payment requests.

Each check looks at the request independently and appends what it finds, so
the caller always receives the complete set of problems in one pass.
"""

import calendar
import re
from datetime import datetime, timezone
from typing import Callable

from cardgate.services.gateway.schemas import PaymentRequest, Violation, ViolationKind

CARD_NUMBER_MIN_LENGTH = 14
CARD_NUMBER_MAX_LENGTH = 19
EXPIRY_YEAR_HORIZON = 20

_DIGITS = re.compile(r"[0-9]+")
_CURRENCY = re.compile(r"[A-Z]{3}")
_CVV = re.compile(r"[0-9]{3,4}")


class ErrorMessages:
    CARD_NUMBER_REQUIRED = "Card number is required."
    CARD_NUMBER_LENGTH_INVALID = "Card number must be between 14-19 digits."
    CARD_NUMBER_NOT_NUMERIC = "Card number must be numeric."
    EXPIRY_MONTH_INVALID = "Expiry month must be between 1 and 12."
    EXPIRY_YEAR_INVALID = "Expiry year must be a valid year."
    CURRENCY_REQUIRED = "Currency is required."
    CURRENCY_NOT_ISO = "Currency must be a 3-letter ISO code (e.g., GBP, USD, EUR)."
    AMOUNT_NOT_POSITIVE = "Amount must be greater than 0."
    CVV_REQUIRED = "CVV is required."
    CVV_INVALID = "CVV must be 3 or 4 digits."
    CARD_EXPIRED = "Card has expired."


Check = Callable[[PaymentRequest, datetime, list[Violation]], None]


def _add(out: list[Violation], field: str, kind: ViolationKind, message: str) -> None:
    out.append(Violation(field=field, kind=kind, message=message))


def _check_card_number(req: PaymentRequest, now: datetime, out: list[Violation]) -> None:
    value = req.card_number
    if not value:
        _add(out, "card_number", ViolationKind.REQUIRED, ErrorMessages.CARD_NUMBER_REQUIRED)
    if value is None:
        return
    if not CARD_NUMBER_MIN_LENGTH <= len(value) <= CARD_NUMBER_MAX_LENGTH:
        _add(out, "card_number", ViolationKind.INVALID_LENGTH, ErrorMessages.CARD_NUMBER_LENGTH_INVALID)
    if not _DIGITS.fullmatch(value):
        _add(out, "card_number", ViolationKind.NOT_NUMERIC, ErrorMessages.CARD_NUMBER_NOT_NUMERIC)


def _check_expiry_month(req: PaymentRequest, now: datetime, out: list[Violation]) -> None:
    if not 1 <= req.expiry_month <= 12:
        _add(out, "expiry_month", ViolationKind.OUT_OF_RANGE, ErrorMessages.EXPIRY_MONTH_INVALID)


def _check_expiry_year(req: PaymentRequest, now: datetime, out: list[Violation]) -> None:
    if not now.year <= req.expiry_year <= now.year + EXPIRY_YEAR_HORIZON:
        _add(out, "expiry_year", ViolationKind.OUT_OF_RANGE, ErrorMessages.EXPIRY_YEAR_INVALID)


def _check_currency(req: PaymentRequest, now: datetime, out: list[Violation]) -> None:
    value = req.currency
    if not value:
        _add(out, "currency", ViolationKind.REQUIRED, ErrorMessages.CURRENCY_REQUIRED)
    if value is not None and not _CURRENCY.fullmatch(value):
        _add(out, "currency", ViolationKind.INVALID_FORMAT, ErrorMessages.CURRENCY_NOT_ISO)


def _check_amount(req: PaymentRequest, now: datetime, out: list[Violation]) -> None:
    if req.amount <= 0:
        _add(out, "amount", ViolationKind.NOT_POSITIVE, ErrorMessages.AMOUNT_NOT_POSITIVE)


def _check_cvv(req: PaymentRequest, now: datetime, out: list[Violation]) -> None:
    value = req.cvv
    if not value:
        _add(out, "cvv", ViolationKind.REQUIRED, ErrorMessages.CVV_REQUIRED)
    if value is not None and not _CVV.fullmatch(value):
        _add(out, "cvv", ViolationKind.INVALID_FORMAT, ErrorMessages.CVV_INVALID)


def expiry_deadline(year: int, month: int) -> datetime:
    """Last second (23:59:59 UTC) on which a card expiring in month/year is usable.

    Raises ValueError when the year cannot be represented.
    """

    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, last_day, 23, 59, 59, tzinfo=timezone.utc)


def _check_expiry_date(req: PaymentRequest, now: datetime, out: list[Violation]) -> None:
    if not 1 <= req.expiry_month <= 12:
        return
    try:
        expired = now > expiry_deadline(req.expiry_year, req.expiry_month)
    except (ValueError, OverflowError):
        expired = True
    if expired:
        _add(out, "expiry_date", ViolationKind.EXPIRED, ErrorMessages.CARD_EXPIRED)


CHECKS: tuple[Check, ...] = (
    _check_card_number,
    _check_expiry_month,
    _check_expiry_year,
    _check_currency,
    _check_amount,
    _check_cvv,
    _check_expiry_date,
)


def validate_payment_request(req: PaymentRequest, now: datetime | None = None) -> list[Violation]:
    """Return every violation found in `req`; an empty list means it is valid."""

    if now is None:
        now = datetime.now(timezone.utc)
    violations: list[Violation] = []
    for check in CHECKS:
        check(req, now, violations)
    return violations
