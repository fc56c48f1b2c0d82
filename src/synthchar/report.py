"""Report snapshots handed to document renderers."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, Tuple

from synthchar.constants import UNRESOLVED_PLACEHOLDER
from synthchar.models import ComponentResult, CompositionShare, ProductResult
from synthchar.session import BatchDerivation

DEFAULT_TITLE = "SynthChar Batch Calculation Report"


def format_value(value: float | None, digits: int = 4) -> str:
    """Fixed-point text for a number, or the placeholder when unresolved."""
    if value is None:
        return UNRESOLVED_PLACEHOLDER
    return f"{value:.{digits}f}"


@dataclass(frozen=True)
class ReportSnapshot:
    """Read-only copy of the batch results at one point in time."""

    title: str
    desired_batch: float
    component_results: Tuple[ComponentResult, ...]
    weight_percents: Tuple[float | None, ...]
    total_weight: float | None
    matrix_total: float
    gf_mode: bool
    gf_results: Tuple[ComponentResult, ...]
    gf_weight_percents: Tuple[float | None, ...]
    gf_total_weight: float | None
    product_results: Tuple[ProductResult, ...]
    product_weight_percents: Tuple[float | None, ...]
    product_total_weight: float | None
    composition: Tuple[CompositionShare, ...]
    warning: str = ""
    generated_on: date = field(default_factory=date.today)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["generated_on"] = self.generated_on.isoformat()
        return payload


def build_report_snapshot(
    derivation: BatchDerivation,
    title: str = DEFAULT_TITLE,
    generated_on: date | None = None,
) -> ReportSnapshot:
    return ReportSnapshot(
        title=title,
        desired_batch=derivation.desired_batch,
        component_results=derivation.comp_results,
        weight_percents=tuple(derivation.weight_percents),
        total_weight=derivation.total_weight,
        matrix_total=derivation.matrix_total,
        gf_mode=derivation.gf_mode,
        gf_results=derivation.gf_results,
        gf_weight_percents=tuple(derivation.gf_weight_percents),
        gf_total_weight=derivation.gf_total_weight,
        product_results=derivation.product_results,
        product_weight_percents=tuple(derivation.product_weight_percents),
        product_total_weight=derivation.product_total_weight,
        composition=derivation.composition,
        warning=derivation.warning,
        generated_on=generated_on or date.today(),
    )


__all__ = ["DEFAULT_TITLE", "ReportSnapshot", "build_report_snapshot", "format_value"]
