"""
Currency conversion table.

Rates are static USD-relative constants; nothing here is fetched.
"""

import math
from dataclasses import dataclass, replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Union

from titan_terminal.domain.exceptions import UnsupportedCurrency
from titan_terminal.domain.models import AllocationSlice, CurrencyCode, PortfolioSummary


@dataclass(frozen=True)
class CurrencyInfo:
    code: CurrencyCode
    symbol: str
    locale: str
    rate: float
    name: str


@dataclass(frozen=True)
class _LocaleFormat:
    group: str
    decimal: str
    symbol_after: bool


SUPPORTED_CURRENCIES: Dict[CurrencyCode, CurrencyInfo] = {
    CurrencyCode.USD: CurrencyInfo(CurrencyCode.USD, "$", "en-US", 1.0, "US Dollar"),
    CurrencyCode.EUR: CurrencyInfo(CurrencyCode.EUR, "€", "de-DE", 0.92, "Euro"),
    CurrencyCode.GBP: CurrencyInfo(CurrencyCode.GBP, "£", "en-GB", 0.79, "British Pound"),
    CurrencyCode.JPY: CurrencyInfo(CurrencyCode.JPY, "\uffe5", "ja-JP", 150.5, "Japanese Yen"),
    CurrencyCode.CNY: CurrencyInfo(CurrencyCode.CNY, "¥", "zh-CN", 7.21, "Chinese Yuan"),
}

_LOCALE_FORMATS: Dict[str, _LocaleFormat] = {
    "en-US": _LocaleFormat(group=",", decimal=".", symbol_after=False),
    "en-GB": _LocaleFormat(group=",", decimal=".", symbol_after=False),
    "de-DE": _LocaleFormat(group=".", decimal=",", symbol_after=True),
    "ja-JP": _LocaleFormat(group=",", decimal=".", symbol_after=False),
    "zh-CN": _LocaleFormat(group=",", decimal=".", symbol_after=False),
}

_CENT = Decimal("0.01")
# Intl joins a trailing symbol with a no-break space
_NBSP = "\u00a0"

CurrencyLike = Union[CurrencyCode, str]


def get_currency(code: CurrencyLike) -> CurrencyInfo:
    """Resolve a code (enum member or case-insensitive string) to its table entry."""
    try:
        key = CurrencyCode(code.upper() if isinstance(code, str) else code)
    except (ValueError, AttributeError):
        raise UnsupportedCurrency(code) from None
    return SUPPORTED_CURRENCIES[key]


def supported_currencies() -> List[CurrencyInfo]:
    return list(SUPPORTED_CURRENCIES.values())


def convert(amount: float, target: CurrencyLike) -> float:
    """Convert a USD amount into ``target``."""
    return amount * get_currency(target).rate


def format_amount(amount: float, currency: CurrencyLike) -> str:
    """
    Render ``amount`` with the currency's symbol and locale conventions.

    Uses 0-2 fractional digits: trailing zeros are dropped and halves round
    away from zero, e.g. ``1234.5`` in EUR renders as ``"1.234,5\\u00a0€"``
    (symbol after the amount, joined by a no-break space).
    """
    info = get_currency(currency)
    fmt = _LOCALE_FORMATS[info.locale]
    sign = "-" if amount < 0 else ""

    if math.isnan(amount):
        body = "NaN"
    elif math.isinf(amount):
        body = "∞"
    else:
        rounded = Decimal(repr(abs(amount))).quantize(_CENT, rounding=ROUND_HALF_UP)
        if rounded == 0:
            sign = ""
        whole, _, fraction = f"{rounded:f}".partition(".")
        fraction = fraction.rstrip("0")
        body = f"{int(whole):,}".replace(",", fmt.group)
        if fraction:
            body = f"{body}{fmt.decimal}{fraction}"

    if fmt.symbol_after:
        return f"{sign}{body}{_NBSP}{info.symbol}"
    return f"{sign}{info.symbol}{body}"


def convert_summary(summary: PortfolioSummary, target: CurrencyLike) -> PortfolioSummary:
    """Convert every monetary field of a summary; the percentage is unit-free."""
    rate = get_currency(target).rate
    return replace(
        summary,
        total_value=summary.total_value * rate,
        total_cost=summary.total_cost * rate,
        total_gain_loss=summary.total_gain_loss * rate,
        allocation=tuple(
            AllocationSlice(asset_class=item.asset_class, value=item.value * rate)
            for item in summary.allocation
        ),
    )
