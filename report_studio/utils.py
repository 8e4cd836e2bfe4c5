"""Utility functions for parsing remote rows and formatting report values."""
import logging
import re
from datetime import date, datetime
from typing import Any, Iterable, List, Optional

from report_studio.config import Config

logger = logging.getLogger(__name__)


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce a numeric column value to float.

    Numeric columns come back from the store as numbers, numeric strings
    or null. Anything that does not parse is treated as ``default``.
    """
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug("Non-numeric value %r, using %s", value, default)
        return default


def format_currency(value: Optional[float], symbol: Optional[str] = None) -> str:
    """Format an amount as ``R 1 234 567.89`` (space-grouped thousands).

    Negative amounts keep their sign in front of the symbol: ``-R 500.00``.
    """
    symbol = Config.CURRENCY_SYMBOL if symbol is None else symbol
    amount = to_number(value)
    body = f"{abs(amount):,.2f}".replace(",", " ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol} {body}"


def format_signed_currency(value: Optional[float], symbol: Optional[str] = None) -> str:
    """Format a variance with an explicit ``+``/``-`` sign."""
    amount = to_number(value)
    sign = "-" if amount < 0 else "+"
    return f"{sign}{format_currency(abs(amount), symbol)}"


def format_number(value: Optional[float], decimals: int = 2) -> str:
    if value is None:
        return "-"
    return f"{to_number(value):.{decimals}f}"


def parse_date(value: Any) -> Optional[date]:
    """Parse an ISO date/timestamp string. Returns None for empty or bad input."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except ValueError:
        logger.warning("Unparseable date %r", value)
        return None


def format_date(value: Any, fallback: str = "-") -> str:
    """Format a date as ``05 March 2025``."""
    parsed = parse_date(value)
    if parsed is None:
        return fallback
    return parsed.strftime("%d %B %Y")


def truncate(text: Optional[str], limit: int) -> str:
    """Shorten ``text`` to ``limit`` characters, ending with an ellipsis."""
    text = text or ""
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def _tag_number(tag: str) -> float:
    match = re.search(r"[\d.]+", tag)
    if not match:
        return 0.0
    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


def _natural_key(tag: str) -> List[Any]:
    return [int(part) if part.isdigit() else part.lower() for part in re.split(r"(\d+)", tag)]


def sort_by_tag(items: Iterable[Any], attr: str = "cable_tag") -> List[Any]:
    """Sort objects by the first number in their tag, then naturally by tag.

    ``C2`` sorts before ``C10``; tags without digits sort first.
    """
    def key(item):
        tag = getattr(item, attr, "") or ""
        return (_tag_number(tag), _natural_key(tag))

    return sorted(items, key=key)
