# formatting.py
"""
Locale/currency aware string formatting for rendered documents.

All functions are pure: same input, same output. Money is always Decimal and
rounded half away from zero at the cent boundary.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from translations import Translator, get_translator

CENT = Decimal("0.01")

CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "$",
    "MXN": "$",
    "EUR": "€",
    "GBP": "£",
}

_MONTHS = {
    "en": ("January", "February", "March", "April", "May", "June", "July",
           "August", "September", "October", "November", "December"),
    "es": ("enero", "febrero", "marzo", "abril", "mayo", "junio", "julio",
           "agosto", "septiembre", "octubre", "noviembre", "diciembre"),
}


@dataclass(frozen=True)
class LocaleSpec:
    language: str
    decimal_sep: str
    group_sep: str
    symbol_after: bool
    date_pattern: str


LOCALES = {
    "en-US": LocaleSpec("en", ".", ",", False, "{month} {day}, {year}"),
    "en-GB": LocaleSpec("en", ".", ",", False, "{day} {month} {year}"),
    "es-MX": LocaleSpec("es", ".", ",", False, "{day} de {month} de {year}"),
    "es-ES": LocaleSpec("es", ",", ".", True, "{day} de {month} de {year}"),
}


def to_decimal(value, default: Decimal | None = None) -> Decimal | None:
    """Coerce str/int/float/Decimal to Decimal; `default` for blanks and garbage."""
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return default
    try:
        if isinstance(value, float):
            return Decimal(repr(value))
        text = str(value).strip().replace(",", "")
        if not text:
            return default
        out = Decimal(text)
    except (InvalidOperation, ValueError):
        return default
    return out if out.is_finite() else default


def round_money(value) -> Decimal:
    return (to_decimal(value, Decimal("0")) or Decimal("0")).quantize(CENT, rounding=ROUND_HALF_UP)


def _group(digits: str, sep: str) -> str:
    out = []
    while len(digits) > 3:
        out.insert(0, digits[-3:])
        digits = digits[:-3]
    out.insert(0, digits)
    return sep.join(out)


def _normalize_locale(locale: str | None) -> str:
    raw = (locale or "en-US").replace("_", "-").strip()
    if raw in LOCALES:
        return raw
    language = raw.split("-")[0].lower()
    for key, spec in LOCALES.items():
        if spec.language == language:
            return key
    return "en-US"


class Formatter:
    """Formats money, dates and numbers for one locale and one currency."""

    def __init__(self, locale: str = "en-US", currency: str = "USD", translator: Translator | None = None):
        self.locale = _normalize_locale(locale)
        self.spec = LOCALES[self.locale]
        self.currency = (currency or "USD").strip().upper()
        self.translator = translator or get_translator(self.spec.language)

    def _number(self, value: Decimal, places: int = 2) -> str:
        rendered = format(abs(value), f".{places}f")
        whole, _, frac = rendered.partition(".")
        whole = _group(whole, self.spec.group_sep)
        return f"{whole}{self.spec.decimal_sep}{frac}" if frac else whole

    def format_currency(self, value) -> str:
        amount = round_money(value)
        body = self._number(amount)
        symbol = CURRENCY_SYMBOLS.get(self.currency)
        if symbol is None:
            text = f"{self.currency} {body}"
        elif self.spec.symbol_after:
            text = f"{body} {symbol}"
        else:
            text = f"{symbol}{body}"
        return f"-{text}" if amount < 0 else text

    def format_date(self, value) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            return self.translator("date.not_specified")
        parsed = parse_date(value)
        if parsed is None:
            return self.translator("date.invalid")
        months = _MONTHS.get(self.spec.language, _MONTHS["en"])
        return self.spec.date_pattern.format(
            month=months[parsed.month - 1], day=parsed.day, year=parsed.year
        )

    def format_quantity(self, value) -> str:
        qty = to_decimal(value, Decimal("0"))
        sign = "-" if qty < 0 else ""
        if qty == qty.to_integral_value():
            return sign + self._number(qty, places=0)
        text = format(abs(qty).normalize(), "f")
        return sign + text.replace(".", self.spec.decimal_sep)

    def format_percent(self, rate) -> str:
        value = to_decimal(rate, Decimal("0"))
        text = format(value.normalize(), "f")
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return text.replace(".", self.spec.decimal_sep)


_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")


def parse_date(value) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        m = _ISO_DATE.match(value.strip())
        if not m:
            return None
        try:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        except ValueError:
            return None
    return None
