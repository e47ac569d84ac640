from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Union

from chainledger.core.enums import Chain


SATS_DECIMALS = 8
WEI_DECIMALS = 18
LAMPORT_DECIMALS = 9

_EPOCH = dt.date(1970, 1, 1)
_MS_PER_DAY = 86_400_000

BASE_UNIT_DECIMALS = {
    Chain.BTC: SATS_DECIMALS,
    Chain.ETH: WEI_DECIMALS,
    Chain.SOL: LAMPORT_DECIMALS,
}


def to_display_units(base_units: int, chain: Chain) -> Decimal:
    # Decimal(int) is exact, scaleb only moves the exponent
    return Decimal(int(base_units)).scaleb(-BASE_UNIT_DECIMALS[chain])


def parse_day(day: Union[dt.date, str]) -> dt.date:
    if isinstance(day, dt.datetime):
        return day.date()
    if isinstance(day, dt.date):
        return day
    try:
        return dt.date.fromisoformat(str(day).strip())
    except ValueError as e:
        raise ValueError(f"Invalid date {day!r}, expected YYYY-MM-DD") from e


def end_of_day_ms(day: Union[dt.date, str]) -> int:
    """Epoch milliseconds of 23:59:59.999 UTC on the given calendar day."""
    days = (parse_day(day) - _EPOCH).days
    return days * _MS_PER_DAY + _MS_PER_DAY - 1
