"""Recipient address normalization.

Brazilian mobile numbers exist on the network both in the legacy
8-digit form and in the current 9-digit form (leading 9), and which one
an account is registered under cannot be known without asking the
network. normalize_address() therefore returns every plausible address,
most likely first, and the sender probes them in order.
"""

import re

from ledgerbot.lib.exceptions import ValidationError

DEFAULT_DOMAIN = "s.whatsapp.net"
BRAZIL_COUNTRY_CODE = "55"

_NON_DIGITS = re.compile(r"\D")


def strip_number(raw: str) -> str:
    """Remove every non-digit character ("+55 (11) 98888-7777" → "5511988887777")."""
    return _NON_DIGITS.sub("", raw or "")


def to_address(raw: str, domain: str = DEFAULT_DOMAIN) -> str:
    """
    Format a single address literally, without alternate variants.

    Addresses that already carry a domain are returned unchanged.

    Raises:
        ValidationError: If the input holds no digits
    """
    if "@" in (raw or ""):
        return raw

    digits = strip_number(raw)
    if not digits:
        raise ValidationError(f"Phone number without digits: {raw!r}", field="phone")

    return f"{digits}@{domain}"


def normalize_address(raw: str, domain: str = DEFAULT_DOMAIN) -> tuple[str, ...]:
    """
    Build the ordered candidate list for a raw phone number.

    Examples:
        >>> normalize_address("5511988887777")
        ('5511988887777@s.whatsapp.net', '551188887777@s.whatsapp.net')
        >>> normalize_address("551188887777")
        ('551188887777@s.whatsapp.net', '5511988887777@s.whatsapp.net')

    Args:
        raw: Phone number in any human-entered format, or a full address
        domain: Address domain suffix

    Returns:
        Candidate addresses, the unmodified number first

    Raises:
        ValidationError: If the input holds no digits
    """
    if "@" in (raw or ""):
        return (raw,)

    digits = strip_number(raw)
    if not digits:
        raise ValidationError(f"Phone number without digits: {raw!r}", field="phone")

    candidates = [f"{digits}@{domain}"]

    national = digits[len(BRAZIL_COUNTRY_CODE):]
    if digits.startswith(BRAZIL_COUNTRY_CODE) and len(national) in (10, 11):
        area_code, subscriber = national[:2], national[2:]

        if len(subscriber) == 9 and subscriber.startswith("9"):
            candidates.append(f"{BRAZIL_COUNTRY_CODE}{area_code}{subscriber[1:]}@{domain}")
        elif len(subscriber) == 8:
            candidates.append(f"{BRAZIL_COUNTRY_CODE}{area_code}9{subscriber}@{domain}")

    return tuple(candidates)
