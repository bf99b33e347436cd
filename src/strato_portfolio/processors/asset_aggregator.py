from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from ..domain import AssetRecord
from ..exceptions import MalformedRecordError
from ..logger import get_logger
from .decimals import resolve_decimals

logger = get_logger(__name__)

_DIGITS = re.compile(r"[0-9]+")


@dataclass
class AssetGroup:
    """Asset records sharing one display name."""

    name: str
    decimals: int
    total_quantity: int = 0
    members: list[AssetRecord] = field(default_factory=list)

    @property
    def token_count(self) -> int:
        return len(self.members)


def parse_quantity(value: Any) -> int:
    """Parse a raw quantity as a non-negative integer.

    Raises:
        MalformedRecordError: If the value is missing, negative or not an
            integer digit string.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        if value < 0:
            raise MalformedRecordError(f"Negative quantity: {value}")
        return value
    if isinstance(value, str) and _DIGITS.fullmatch(value.strip()):
        return int(value.strip())
    raise MalformedRecordError(f"Unparseable quantity: {value!r}")


def _sort_key(group: AssetGroup) -> tuple[str, str]:
    return (group.name.casefold(), group.name)


def group_assets(records: Iterable[AssetRecord]) -> list[AssetGroup]:
    """Group asset records by display name.

    Args:
        records: Raw asset records in any order

    Returns:
        Groups sorted by name, each with the exact integer sum of its members'
        quantities. A malformed quantity counts as zero but the record still
        counts as a member. Decimals come from the first record seen.
    """
    groups: dict[str, AssetGroup] = {}

    for record in records:
        key = record.display_name
        group = groups.get(key)
        if group is None:
            group = AssetGroup(name=key, decimals=resolve_decimals(key, record.decimals))
            groups[key] = group

        try:
            quantity = parse_quantity(record.quantity)
        except MalformedRecordError as e:
            logger.warning("Treating quantity of %s as 0: %s", key, e)
            quantity = 0

        group.total_quantity += quantity
        group.members.append(record)

    return sorted(groups.values(), key=_sort_key)
