import re
from typing import Any, Optional

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
}
DEFAULT_SYMBOL = "$"

_SYMBOLS = "$€£¥₹"
# 19 | 19.99 | 1,299.99 | 1.299,99
_AMOUNT = r"\d+(?:[.,]\d{3})*(?:[.,]\d{1,2})?"

PRICE_RE = re.compile(
    rf"[{_SYMBOLS}]\s?{_AMOUNT}(?!\d)|(?<![\d.,]){_AMOUNT}\s?[{_SYMBOLS}]"
)
PLAIN_DECIMAL_RE = re.compile(r"^\d+(?:[.,]\d{1,2})?$")
BARE_NUMBER_RE = re.compile(r"^\s*\d[\d.,]*\s*$")


def symbol_for(code: Optional[str]) -> str:
    if not code:
        return DEFAULT_SYMBOL
    return CURRENCY_SYMBOLS.get(str(code).strip().upper(), DEFAULT_SYMBOL)


def format_price(value: Any, currency: Optional[str] = None) -> str:
    """Prefix a bare amount with the symbol for ``currency`` ($ when unknown)."""
    return f"{symbol_for(currency)}{value}"


def find_price(text: Optional[str]) -> Optional[str]:
    """Return the first currency-marked amount in ``text``, verbatim."""
    if not text:
        return None
    m = PRICE_RE.search(text)
    return m.group(0) if m else None


def looks_like_price(text: Optional[str]) -> bool:
    if not text:
        return False
    return bool(PRICE_RE.search(text) or PLAIN_DECIMAL_RE.match(text))


def is_bare_amount(value: Any) -> bool:
    """True for numbers and numeric strings that carry no currency marker."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and bool(BARE_NUMBER_RE.match(value))
