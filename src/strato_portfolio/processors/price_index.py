from __future__ import annotations

from typing import Iterable, Sequence

from ..constants import PRICE_ALIASES, PriceAlias
from ..domain import OracleObservation
from ..logger import get_logger

logger = get_logger(__name__)

PriceIndex = dict[str, str]


def apply_price_aliases(
    index: PriceIndex,
    aliases: Sequence[PriceAlias] = PRICE_ALIASES,
) -> PriceIndex:
    """Fill derived symbols from the alias table.

    Sources are looked up in the directly observed prices only, so an alias
    never feeds another alias. Symbols already observed are left untouched.
    """
    observed = dict(index)
    result = dict(index)
    for alias in aliases:
        if alias.target in observed:
            logger.debug("Keeping observed price for %s", alias.target)
            continue
        if alias.pinned is not None:
            result[alias.target] = alias.pinned
        elif alias.source is not None and alias.source in observed:
            result[alias.target] = observed[alias.source]
    return result


def build_price_index(
    observations: Iterable[OracleObservation],
    aliases: Sequence[PriceAlias] = PRICE_ALIASES,
) -> PriceIndex:
    """Reduce oracle observations to one latest price per symbol.

    Args:
        observations: Observations in arrival order; later entries win
        aliases: Alias and peg rules applied once after the reduction

    Returns:
        Mapping of symbol to price string
    """
    index: PriceIndex = {}
    for observation in observations:
        if not observation.name or not observation.consensus_price:
            continue
        index[observation.name] = observation.consensus_price

    logger.debug("Reduced oracle feed to %d observed prices", len(index))
    return apply_price_aliases(index, aliases)
