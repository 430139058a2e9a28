from typing import Dict, List

from .core.errors import ValidationError


SUPPORTED_CURRENCIES: List[Dict[str, str]] = [
    {"code": "USD", "label": "US Dollar"},
    {"code": "THB", "label": "Thai Baht"},
    {"code": "MMK", "label": "Myanmar Kyat"},
    {"code": "EUR", "label": "Euro"},
    {"code": "JPY", "label": "Japanese Yen"},
    {"code": "GBP", "label": "British Pound"},
    {"code": "CNY", "label": "Chinese Yuan"},
    {"code": "SGD", "label": "Singapore Dollar"},
    {"code": "KRW", "label": "Korean Won"},
    {"code": "AUD", "label": "Australian Dollar"},
]

SUPPORTED_CODES = frozenset(c["code"] for c in SUPPORTED_CURRENCIES)


def normalize_currency(code: str) -> str:
    """Upper-case a currency code and check it is in the supported set."""
    normalized = (code or "").strip().upper()
    if normalized not in SUPPORTED_CODES:
        raise ValidationError(f"Unsupported currency: {code}")
    return normalized
