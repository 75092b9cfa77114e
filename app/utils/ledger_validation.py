"""Parsing of untrusted ledger input."""
import math
from typing import Any, Optional

from app.core.exceptions import LedgerValidationError

# Keeps any realistic running total finite
MAX_AMOUNT = 1e12


def require_text(value: Optional[str], field: str) -> str:
    """Return the stripped text, rejecting missing or blank values."""
    if value is None or not str(value).strip():
        raise LedgerValidationError(f"{field} is required")
    return str(value).strip()


def parse_amount(value: Any, field: str = "amount", required: bool = True) -> Optional[float]:
    """
    Parse a monetary amount from a number or numeric string.

    Rules:
    - None / blank string -> error if required, else None
    - booleans and non-numeric strings are rejected, never coerced to 0
    - NaN, infinities and magnitudes above MAX_AMOUNT are rejected
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise LedgerValidationError(f"{field} is required")
        return None

    if isinstance(value, bool):
        raise LedgerValidationError(f"{field} must be a number")

    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise LedgerValidationError(f"{field} must be a number, got {value!r}")

    if not math.isfinite(amount):
        raise LedgerValidationError(f"{field} must be a finite number")
    if abs(amount) > MAX_AMOUNT:
        raise LedgerValidationError(f"{field} must not exceed {MAX_AMOUNT:.0f}")
    return amount


def parse_positive_amount(value: Any, field: str = "amount") -> float:
    amount = parse_amount(value, field)
    if amount <= 0:
        raise LedgerValidationError(f"{field} must be greater than 0")
    return amount


def parse_initial_debt(value: Any) -> Optional[float]:
    """
    Parse the optional debt recorded with a new client.

    Missing or zero means "no initial debt" (None); negatives are rejected.
    """
    amount = parse_amount(value, "initialDebt", required=False)
    if amount is None or amount == 0:
        return None
    if amount < 0:
        raise LedgerValidationError("initialDebt must not be negative")
    return amount
