"""Deterministic transaction extraction from free text.

extract_transaction() turns a chat message such as
"R$ 50,00 mercado" or "recebi 200 reais da clínica" into an
ExtractedTransactionIntent, or returns None when the message carries
no amount. It never raises for unmatched input.

Precedence:
    1. Amount (required): "R$ 50,00", "R$50", "50 reais", "50 rs"
    2. Direction: income keywords, otherwise expense
    3. Description: text after the amount token up to the line break
    4. Category: first matching row of CATEGORY_KEYWORDS, else "Outros"
    5. Context: CLINIC on clinic keywords, else HOME
    6. Date: optional DD/MM[/YYYY], year defaults to the current one
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from ledgerbot.models.transaction import ContextTag, Direction, ExtractedTransactionIntent
from ledgerbot.services.extraction.tables import (
    CATEGORY_KEYWORDS,
    CLINIC_KEYWORDS,
    DEFAULT_CATEGORY,
    INCOME_KEYWORDS,
)

# Single-group decimals only; thousands separators ("1.234,56") are not supported
_NUMBER = r"\d+(?:[.,]\d{1,2})?"

_AMOUNT_PATTERN = re.compile(
    rf"r\$\s*(?P<prefixed>{_NUMBER})(?![\d.,]?\d)"
    rf"|(?<![\d/.,])(?P<suffixed>{_NUMBER})(?![\d.,]?\d)\s*(?:reais|real|rs)\b",
    re.IGNORECASE,
)

_DATE_PATTERN = re.compile(r"(?<![\d/])(\d{1,2})/(\d{1,2})(?:/(\d{4}))?(?![\d/])")

_CENTS = Decimal("0.01")


def parse_amount(value: str) -> Optional[Decimal]:
    """
    Parse a matched amount ("50,00", "50.5", "50") into a positive Decimal.

    Returns:
        Amount with two decimal places, or None if not positive/parseable
    """
    try:
        amount = Decimal(value.replace(",", ".")).quantize(_CENTS)
    except InvalidOperation:
        return None

    if amount <= 0:
        return None
    return amount


def detect_direction(normalized_text: str) -> Direction:
    if any(keyword in normalized_text for keyword in INCOME_KEYWORDS):
        return Direction.INCOME
    return Direction.EXPENSE


def detect_category(normalized_text: str) -> str:
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in normalized_text for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def detect_context(normalized_text: str) -> ContextTag:
    if any(keyword in normalized_text for keyword in CLINIC_KEYWORDS):
        return ContextTag.CLINIC
    return ContextTag.HOME


def extract_date(text: str, today: Optional[date] = None) -> Optional[date]:
    """
    Find a DD/MM or DD/MM/YYYY date.

    Impossible dates (31/02) are ignored rather than raised.
    """
    match = _DATE_PATTERN.search(text)
    if not match:
        return None

    day, month, year = match.groups()
    if year is None:
        year = (today or date.today()).year

    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def extract_transaction(
    text: str, today: Optional[date] = None
) -> Optional[ExtractedTransactionIntent]:
    """
    Extract a financial intent from a chat message.

    Args:
        text: Message body (typed or transcribed)
        today: Reference date for year-less dates (defaults to date.today())

    Returns:
        ExtractedTransactionIntent, or None if no amount was found
    """
    if not text or not text.strip():
        return None

    match = _AMOUNT_PATTERN.search(text)
    if not match:
        return None

    amount = parse_amount(match.group("prefixed") or match.group("suffixed"))
    if amount is None:
        return None

    normalized = text.lower().strip()
    description = text[match.end():].split("\n", 1)[0].strip()

    return ExtractedTransactionIntent(
        amount=amount,
        direction=detect_direction(normalized),
        category=detect_category(normalized),
        context_tag=detect_context(normalized),
        description=description or None,
        occurred_on=extract_date(text, today),
    )
