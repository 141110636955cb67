"""Formatting helpers shared by the channel templates."""
from __future__ import annotations

import html
import logging
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

from babel.core import UnknownLocaleError
from babel.dates import format_date as babel_format_date
from babel.dates import format_datetime as babel_format_datetime
from babel.numbers import format_currency as babel_format_currency

from .config import DEFAULT_CURRENCY, DEFAULT_LOCALE, locale

LOGGER = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")
_ANCHOR_RE = re.compile(r'<a\s[^>]*?href="([^"]*)"[^>]*>(.*?)</a>', re.IGNORECASE | re.DOTALL)
_BLOCK_TAG_RE = re.compile(r"</?(?:p|div|h[1-6]|br|li|ul|ol|tr|table)\b[^>]*>", re.IGNORECASE)
_BLANK_RUN_RE = re.compile(r"\s*\n\s*")
_INLINE_SPACE_RE = re.compile(r"[ \t]+")


def _localized(formatter, *args, **kwargs) -> str:
    try:
        return formatter(*args, locale=locale(), **kwargs)
    except (UnknownLocaleError, ValueError):
        LOGGER.warning("Unknown locale %r; falling back to %s", locale(), DEFAULT_LOCALE)
        return formatter(*args, locale=DEFAULT_LOCALE, **kwargs)


def _to_decimal(amount: Any) -> Decimal:
    if amount is None or amount == "" or isinstance(amount, bool):
        return Decimal("0")
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        LOGGER.warning("Unparseable amount %r; formatting as zero", amount)
        return Decimal("0")
    return value if value.is_finite() else Decimal("0")


def format_currency(amount: Any = 0, currency: Any = DEFAULT_CURRENCY) -> str:
    """Format ``amount`` as money in ``currency`` using the configured locale.

    >>> format_currency(1234.5, "USD")
    '$1,234.50'
    """
    code = str(currency if currency is not None else "").strip().upper() or DEFAULT_CURRENCY
    return _localized(babel_format_currency, _to_decimal(amount), code)


def _parse_when(value: Any) -> Optional[datetime | date]:
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Millisecond epoch timestamps, as the web client sends them.
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def format_date(value: Any, default: str = "N/A") -> str:
    """Locale-aware medium date. Unparseable strings are returned unchanged."""
    parsed = _parse_when(value)
    if parsed is None:
        return str(value) if value not in (None, "") else default
    if isinstance(parsed, datetime):
        parsed = parsed.date()
    return _localized(babel_format_date, parsed, format="medium")


def format_datetime(value: Any = None) -> str:
    """Locale-aware medium date and time; defaults to now."""
    parsed = _parse_when(value) if value is not None else datetime.now()
    if parsed is None:
        return str(value)
    if not isinstance(parsed, datetime):
        parsed = datetime.combine(parsed, datetime.min.time())
    return _localized(babel_format_datetime, parsed, format="medium")


def html_to_text(markup: str) -> str:
    """Plain-text alternative derived from the HTML body.

    Block elements become line breaks, links keep their target in
    parentheses, every other tag is dropped.
    """
    text = _ANCHOR_RE.sub(r"\2 (\1)", markup)
    text = _BLOCK_TAG_RE.sub("\n", text)
    text = html.unescape(_TAG_RE.sub("", text))
    text = _INLINE_SPACE_RE.sub(" ", text)
    return _BLANK_RUN_RE.sub("\n", text).strip()


def escape(value: Any) -> str:
    return html.escape(str(value), quote=True)


def stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def stringify_data(data: Mapping[str, Any]) -> Dict[str, str]:
    """FCM only accepts string values in the data payload."""
    return {str(key): stringify(value) for key, value in data.items()}


def deep_link(section: str, identifier: Any = None, *, base: str = "") -> str:
    path = f"{base}/{section}"
    if identifier not in (None, ""):
        path = f"{path}/{quote(str(identifier), safe='')}"
    return path
