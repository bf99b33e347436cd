from __future__ import annotations

from dataclasses import dataclass, field

from ..domain import AssetRecord, OracleObservation
from ..processors import AssetGroup, PortfolioValuation, PriceIndex
from ..state import AppState


@dataclass
class PipelineContext:
    state: AppState
    owner: str
    asset_records: list[AssetRecord] | None = None
    observations: list[OracleObservation] | None = None
    fetch_failures: list[str] = field(default_factory=list)
    groups: list[AssetGroup] | None = None
    prices: PriceIndex | None = None
    valuation: PortfolioValuation | None = None

    @property
    def asset_records_required(self) -> list[AssetRecord]:
        if self.asset_records is None:
            raise RuntimeError(
                "Asset records have not been set. Ensure fetch_inputs() is called before accessing this property."
            )
        return self.asset_records

    @property
    def observations_required(self) -> list[OracleObservation]:
        if self.observations is None:
            raise RuntimeError(
                "Oracle observations have not been set. Ensure fetch_inputs() is called before accessing this property."
            )
        return self.observations

    @property
    def valuation_required(self) -> PortfolioValuation:
        if self.valuation is None:
            raise RuntimeError(
                "Valuation has not been set. Ensure compute_portfolio() is called before accessing this property."
            )
        return self.valuation
