from __future__ import annotations

import re
from typing import Any, Mapping

from ..constants import DECIMALS_OVERRIDES, DEFAULT_DECIMALS

_DIGITS = re.compile(r"[0-9]+")


def _coerce_decimals(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str) and _DIGITS.fullmatch(value.strip()):
        return int(value.strip())
    return None


def resolve_decimals(
    asset_name: str,
    reported_decimals: Any = None,
    overrides: Mapping[str, int] = DECIMALS_OVERRIDES,
) -> int:
    """Return the fractional digit count to use for an asset.

    Args:
        asset_name: Display name of the asset group
        reported_decimals: Decimals reported by cirrus, possibly missing or
            malformed
        overrides: Assets whose reported decimals are ignored

    Returns:
        The override for ``asset_name`` if one exists, else the reported value
        when it is a non-negative integer, else ``DEFAULT_DECIMALS``.
    """
    if asset_name in overrides:
        return overrides[asset_name]
    coerced = _coerce_decimals(reported_decimals)
    return DEFAULT_DECIMALS if coerced is None else coerced
