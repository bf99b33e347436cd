"""Domain models for portfolio inputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..constants import UNNAMED_ASSET


@dataclass(frozen=True)
class AssetRecord:
    """One tokenized holding as returned by the cirrus asset table.

    ``quantity`` and ``decimals`` are kept as received; parsing happens in the
    processors so a malformed record never breaks ingestion.
    """

    name: str | None = None
    id: str | None = None
    quantity: Any = None
    decimals: Any = None
    type: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def display_name(self) -> str:
        """``name``, else ``id``, else the unnamed placeholder."""
        if self.name:
            return self.name
        if self.id:
            return self.id
        return UNNAMED_ASSET

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> AssetRecord:
        name = payload.get("name")
        record_id = payload.get("id")
        asset_type = payload.get("type")
        return cls(
            name=str(name) if name else None,
            id=str(record_id) if record_id else None,
            quantity=payload.get("quantity"),
            decimals=payload.get("decimals"),
            type=str(asset_type) if asset_type else None,
            raw=payload,
        )


@dataclass(frozen=True)
class OracleObservation:
    """A consensus price reported for a named asset."""

    name: str
    consensus_price: str

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> OracleObservation:
        name = payload.get("name")
        price = payload.get("consensusPrice")
        return cls(
            name=str(name) if name is not None else "",
            consensus_price=str(price) if price is not None else "",
        )
