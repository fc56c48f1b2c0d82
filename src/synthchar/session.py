"""Batch session state, edit events and result derivation.

The session is modelled as a pure reducer: ``reduce(state, event)`` returns a
new :class:`SessionState` and ``derive(state)`` rebuilds every result from
scratch. :class:`BatchSession` wraps the two for interactive callers and owns
the one-shot periodic table load.

State machine::

    UNINITIALIZED --TableLoaded--> READY --any edit--> EDITING --any edit--> EDITING

Edits are accepted before the table is loaded; the session then stays
``UNINITIALIZED`` and every molecular-weight-dependent value is ``None``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Dict, List, Sequence, Tuple, Union

from synthchar.batch import (
    BatchWeights,
    batch_weights,
    gf_adjusted_quantities,
    precursor_quantities,
    product_quantities,
)
from synthchar.chemistry import gravimetric_factor, gravimetric_factor_from_weights, molecular_weight
from synthchar.config import Settings
from synthchar.constants import (
    DEFAULT_DESIRED_BATCH,
    MATRIX_TARGET,
    MATRIX_TOLERANCE,
    MATRIX_WARNING,
)
from synthchar.errors import InvariantViolation, Issue, IssueKind, TableLoadError
from synthchar.models import (
    ComponentEntry,
    ComponentResult,
    CompositionShare,
    ProductEntry,
    ProductResult,
)
from synthchar.periodic import AtomicLookup, load_atomic_table

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    EDITING = "editing"


@dataclass(frozen=True)
class GFCalculatorInputs:
    """Inputs of the stand-alone gravimetric factor calculator."""

    precursor_formula: str = "H3BO3"
    precursor_moles: float = 2.0
    product_formula: str = "B2O3"
    product_moles: float = 1.0


@dataclass(frozen=True)
class SessionState:
    status: SessionStatus = SessionStatus.UNINITIALIZED
    table: AtomicLookup | None = None
    components: Tuple[ComponentEntry, ...] = ()
    products: Tuple[ProductEntry, ...] = ()
    desired_batch: float = DEFAULT_DESIRED_BATCH
    calculator: GFCalculatorInputs = field(default_factory=GFCalculatorInputs)


# --- events -----------------------------------------------------------------


@dataclass(frozen=True)
class TableLoaded:
    table: AtomicLookup


@dataclass(frozen=True)
class LoadRecipe:
    """Replace every row at once, e.g. from a saved recipe file."""

    components: Tuple[ComponentEntry, ...]
    products: Tuple[ProductEntry, ...] = ()
    desired_batch: float | None = None


@dataclass(frozen=True)
class AddComponent:
    formula: str = ""
    matrix: float | str = 0.0


@dataclass(frozen=True)
class RemoveComponent:
    index: int | None = None  # None removes the last row


@dataclass(frozen=True)
class SetComponentCount:
    count: int


@dataclass(frozen=True)
class EditComponentFormula:
    index: int
    formula: str


@dataclass(frozen=True)
class EditComponentMatrix:
    index: int
    matrix: float | str


@dataclass(frozen=True)
class EditProductFormula:
    index: int
    formula: str


@dataclass(frozen=True)
class EditProductPrecursor:
    index: int
    precursor_formula: str


@dataclass(frozen=True)
class EditProductMoles:
    index: int
    precursor_moles: float | str | None = None
    product_moles: float | str | None = None


@dataclass(frozen=True)
class SetDesiredBatch:
    desired_batch: float | str


@dataclass(frozen=True)
class EditGFCalculator:
    precursor_formula: str | None = None
    precursor_moles: float | str | None = None
    product_formula: str | None = None
    product_moles: float | str | None = None


Event = Union[
    TableLoaded,
    LoadRecipe,
    AddComponent,
    RemoveComponent,
    SetComponentCount,
    EditComponentFormula,
    EditComponentMatrix,
    EditProductFormula,
    EditProductPrecursor,
    EditProductMoles,
    SetDesiredBatch,
    EditGFCalculator,
]


# --- derived results --------------------------------------------------------


@dataclass(frozen=True)
class BatchDerivation:
    """Everything a presentation or report layer reads from a session."""

    status: SessionStatus
    components: Tuple[ComponentEntry, ...]
    products: Tuple[ProductEntry, ...]
    desired_batch: float
    comp_results: Tuple[ComponentResult, ...]
    total_weight: float | None
    gf_mode: bool
    gf_results: Tuple[ComponentResult, ...]
    gf_total_weight: float | None
    product_results: Tuple[ProductResult, ...]
    product_total_weight: float | None
    calculator_gf: float | None
    composition: Tuple[CompositionShare, ...]
    warning: str = ""
    issues: Tuple[Issue, ...] = ()

    @property
    def weight_percents(self) -> List[float | None]:
        return [r.scaled_weight for r in self.comp_results]

    @property
    def gf_weight_percents(self) -> List[float | None]:
        return [r.scaled_weight for r in self.gf_results]

    @property
    def product_weight_percents(self) -> List[float | None]:
        return [r.scaled_weight for r in self.product_results]

    @property
    def matrix_total(self) -> float:
        return sum(c.matrix for c in self.components)


# --- helpers ----------------------------------------------------------------


def coerce_number(value: float | str | None, default: float = 0.0) -> float:
    """Read a numeric field, accepting a comma as decimal separator."""
    if value is None:
        return default
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.debug("Non-numeric input %r replaced by %s", value, default)
        return default
    if not math.isfinite(number):
        logger.debug("Non-finite input %r replaced by %s", value, default)
        return default
    return number


def default_components() -> Tuple[ComponentEntry, ...]:
    return (
        ComponentEntry(formula="CaO", matrix=30.0),
        ComponentEntry(formula="La2O3", matrix=10.0),
        ComponentEntry(formula="H3BO3", matrix=60.0),
    )


def default_products() -> Tuple[ProductEntry, ...]:
    return (
        ProductEntry(formula="B2O3", precursor_formula="H3BO3", precursor_moles=2.0, product_moles=1.0),
        ProductEntry(formula="La2O3", precursor_formula="La2O3", precursor_moles=1.0, product_moles=1.0),
    )


def initial_state(desired_batch: float = DEFAULT_DESIRED_BATCH) -> SessionState:
    """Default recipe with no periodic table loaded yet."""
    components = default_components()
    return SessionState(
        components=components,
        products=sync_products(components, default_products()),
        desired_batch=desired_batch,
    )


def sync_products(
    components: Sequence[ComponentEntry],
    products: Sequence[ProductEntry],
) -> Tuple[ProductEntry, ...]:
    """Match the product row count to the components and repair dangling links.

    A product whose precursor link is blank or names no existing component is
    pointed at the component in the same row.
    """
    synced = list(products[: len(components)])
    while len(synced) < len(components):
        synced.append(ProductEntry())

    formulas = {c.formula for c in components if c.formula}
    for index, (component, product) in enumerate(zip(components, synced)):
        if component.formula and product.precursor_formula not in formulas:
            synced[index] = replace(product, precursor_formula=component.formula)
    return tuple(synced)


def _check_index(index: int, rows: Sequence[object], kind: str) -> None:
    if not 0 <= index < len(rows):
        raise InvariantViolation(f"{kind} index {index} out of range for {len(rows)} rows")


def _refresh(state: SessionState) -> SessionState:
    """Recompute every molecular weight and gravimetric factor."""
    cache: Dict[str, float | None] = {}

    def mw(formula: str) -> float | None:
        if formula not in cache:
            cache[formula] = molecular_weight(formula, state.table)
        return cache[formula]

    components = tuple(replace(c, molecular_weight=mw(c.formula)) for c in state.components)
    products = tuple(
        replace(
            p,
            molecular_weight=mw(p.formula),
            gravimetric_factor=gravimetric_factor_from_weights(
                mw(p.precursor_formula), p.precursor_moles, mw(p.formula), p.product_moles
            ),
        )
        for p in state.products
    )
    return replace(state, components=components, products=products)


def _with_rows(
    state: SessionState,
    components: Sequence[ComponentEntry],
    products: Sequence[ProductEntry],
) -> SessionState:
    components = tuple(components)
    return _refresh(
        replace(state, components=components, products=sync_products(components, products))
    )


def _rename_links(
    products: Sequence[ProductEntry],
    components: Sequence[ComponentEntry],
    old: str,
    new: str,
) -> List[ProductEntry]:
    """Point products that followed ``old`` at ``new`` once ``old`` is gone."""
    if not old or any(c.formula == old for c in components):
        return list(products)
    return [
        replace(p, precursor_formula=new) if p.precursor_formula == old else p
        for p in products
    ]


# --- reducer ----------------------------------------------------------------


def reduce(state: SessionState, event: Event) -> SessionState:
    """Apply one edit event and return the new state."""
    if isinstance(event, TableLoaded):
        components = state.components or default_components()
        loaded = replace(state, status=SessionStatus.READY, table=event.table)
        return _with_rows(loaded, components, state.products)

    status = SessionStatus.UNINITIALIZED if state.table is None else SessionStatus.EDITING
    state = replace(state, status=status)
    components = list(state.components)
    products = list(state.products)

    if isinstance(event, SetDesiredBatch):
        # Scaling only; molecular weights and factors are unaffected.
        return replace(state, desired_batch=coerce_number(event.desired_batch))

    if isinstance(event, LoadRecipe):
        components = list(event.components) or [ComponentEntry()]
        products = list(event.products)
        if event.desired_batch is not None:
            state = replace(state, desired_batch=coerce_number(event.desired_batch))
    elif isinstance(event, AddComponent):
        components.append(ComponentEntry(formula=event.formula, matrix=coerce_number(event.matrix)))
    elif isinstance(event, RemoveComponent):
        if len(components) <= 1:
            logger.debug("Keeping the last component row")
            return state
        index = len(components) - 1 if event.index is None else event.index
        _check_index(index, components, "Component")
        del components[index]
        if index < len(products):
            del products[index]
    elif isinstance(event, SetComponentCount):
        count = max(1, int(event.count))
        if count < len(components):
            components = components[:count]
        else:
            components.extend(ComponentEntry() for _ in range(count - len(components)))
    elif isinstance(event, EditComponentFormula):
        _check_index(event.index, components, "Component")
        old = components[event.index].formula
        components[event.index] = replace(components[event.index], formula=event.formula)
        products = _rename_links(products, components, old, event.formula)
    elif isinstance(event, EditComponentMatrix):
        _check_index(event.index, components, "Component")
        components[event.index] = replace(
            components[event.index], matrix=coerce_number(event.matrix)
        )
    elif isinstance(event, EditProductFormula):
        _check_index(event.index, products, "Product")
        products[event.index] = replace(products[event.index], formula=event.formula)
    elif isinstance(event, EditProductPrecursor):
        _check_index(event.index, products, "Product")
        products[event.index] = replace(
            products[event.index], precursor_formula=event.precursor_formula
        )
    elif isinstance(event, EditProductMoles):
        _check_index(event.index, products, "Product")
        product = products[event.index]
        products[event.index] = replace(
            product,
            precursor_moles=coerce_number(event.precursor_moles, product.precursor_moles),
            product_moles=coerce_number(event.product_moles, product.product_moles),
        )
    elif isinstance(event, EditGFCalculator):
        calc = state.calculator
        return replace(
            state,
            calculator=GFCalculatorInputs(
                precursor_formula=(
                    calc.precursor_formula if event.precursor_formula is None else event.precursor_formula
                ),
                precursor_moles=coerce_number(event.precursor_moles, calc.precursor_moles),
                product_formula=(
                    calc.product_formula if event.product_formula is None else event.product_formula
                ),
                product_moles=coerce_number(event.product_moles, calc.product_moles),
            ),
        )
    else:
        raise InvariantViolation(f"Unknown session event {event!r}")

    logger.debug("Applied %s; recomputing %d components", type(event).__name__, len(components))
    return _with_rows(state, components, products)


# --- derivation -------------------------------------------------------------


def _composition(components: Sequence[ComponentEntry]) -> Tuple[CompositionShare, ...]:
    shares: Dict[str, float] = {}
    for c in components:
        if not c.formula or not c.matrix:
            continue
        shares[c.formula] = shares.get(c.formula, 0.0) + c.matrix
    total = sum(shares.values())
    if total == 0:
        return ()
    return tuple(
        CompositionShare(formula=formula, percentage=value / total * 100.0)
        for formula, value in shares.items()
    )


def matrix_warning(components: Sequence[ComponentEntry], tolerance: float = MATRIX_TOLERANCE) -> str:
    total = sum(c.matrix for c in components)
    if abs(total - MATRIX_TARGET) > tolerance and total != 0:
        return MATRIX_WARNING
    return ""


def _component_results(
    components: Sequence[ComponentEntry],
    weights: Sequence[float | None],
    bundle: BatchWeights,
    product_formulas: Sequence[str | None] | None = None,
) -> Tuple[ComponentResult, ...]:
    product_formulas = product_formulas or [None] * len(components)
    return tuple(
        ComponentResult(
            formula=c.formula,
            matrix=c.matrix,
            molecular_weight=weight,
            molar_quantity=quantity,
            scaled_weight=scaled,
            product_formula=product_formula,
        )
        for c, weight, quantity, scaled, product_formula in zip(
            components, weights, bundle.quantity_list(), bundle.scaled_list(), product_formulas
        )
    )


def derive(state: SessionState, matrix_tolerance: float = MATRIX_TOLERANCE) -> BatchDerivation:
    """Rebuild every result from the current state."""
    components = state.components
    products = state.products
    desired = state.desired_batch
    issues: List[Issue] = []
    loaded = state.table is not None

    if loaded:
        for entry in (*components, *products):
            if entry.formula and entry.molecular_weight is None:
                issues.append(
                    Issue(
                        IssueKind.UNKNOWN_ELEMENT,
                        f"{entry.formula} contains an unknown element",
                        formula=entry.formula,
                    )
                )

    warning = matrix_warning(components, matrix_tolerance)
    if warning:
        issues.append(Issue(IssueKind.MATRIX_SUM_MISMATCH, warning))

    # Links are looked up by formula on every pass; the first component wins.
    by_formula: Dict[str, ComponentEntry] = {}
    for c in components:
        if c.formula:
            by_formula.setdefault(c.formula, c)
    mole_factors: Dict[str, float] = {}
    gf_links: Dict[str, ProductEntry] = {}
    for p in products:
        # Blank product rows are placeholders, not reactions.
        if not p.precursor_formula or not p.formula:
            continue
        mole_factors[p.precursor_formula] = p.precursor_moles
        if p.gravimetric_factor is not None and p.precursor_formula in by_formula:
            gf_links[p.precursor_formula] = p

    matrices = [c.matrix for c in components]
    precursor_weights = [c.molecular_weight for c in components]

    precursor = batch_weights(
        precursor_quantities(
            matrices,
            precursor_weights,
            [mole_factors.get(c.formula) or 1.0 for c in components],
        ),
        desired,
    )
    comp_results = _component_results(components, precursor_weights, precursor)

    gf_mode = bool(gf_links)
    if gf_mode:
        linked = [gf_links.get(c.formula) for c in components]
        effective = [
            p.molecular_weight if p is not None else c.molecular_weight
            for c, p in zip(components, linked)
        ]
        adjusted = batch_weights(gf_adjusted_quantities(matrices, effective), desired)
        gf_results = _component_results(
            components, effective, adjusted, [p.formula if p is not None else None for p in linked]
        )
        gf_total = adjusted.total
    else:
        adjusted = precursor
        gf_results = comp_results
        gf_total = precursor.total

    product_bundle = batch_weights(
        product_quantities(
            [by_formula[p.precursor_formula].matrix if p.precursor_formula in by_formula else 0.0 for p in products],
            [p.molecular_weight for p in products],
            [p.gravimetric_factor for p in products],
            [p.precursor_moles for p in products],
            [p.product_moles for p in products],
        ),
        desired,
    )
    product_results = tuple(
        ProductResult(
            formula=p.formula,
            precursor_formula=p.precursor_formula,
            precursor_moles=p.precursor_moles,
            product_moles=p.product_moles,
            molecular_weight=p.molecular_weight,
            gravimetric_factor=p.gravimetric_factor,
            molar_quantity=quantity,
            scaled_weight=scaled,
        )
        for p, quantity, scaled in zip(
            products, product_bundle.quantity_list(), product_bundle.scaled_list()
        )
    )

    if loaded:
        bundles = [("Precursor", precursor)]
        if gf_mode:
            bundles.append(("GF-adjusted", adjusted))
        if any(p.formula for p in products):
            bundles.append(("Product", product_bundle))
        for label, bundle in bundles:
            if bundle.overflowed:
                issues.append(
                    Issue(
                        IssueKind.DIVISION_BY_ZERO,
                        f"{label} total weight is not finite; batch weights are unavailable",
                    )
                )
            elif bundle.total == 0.0 and len(bundle.quantities):
                issues.append(
                    Issue(
                        IssueKind.DIVISION_BY_ZERO,
                        f"{label} total weight is zero; batch weights are unavailable",
                    )
                )
        for p in products:
            if (
                p.formula
                and p.product_moles == 0
                and p.molecular_weight
                and molecular_weight(p.precursor_formula, state.table)
            ):
                issues.append(
                    Issue(
                        IssueKind.DIVISION_BY_ZERO,
                        f"{p.formula} has zero product moles; gravimetric factor is unavailable",
                        formula=p.formula,
                    )
                )

    calc = state.calculator
    calculator_gf = gravimetric_factor(
        calc.precursor_formula,
        calc.product_formula,
        calc.precursor_moles,
        calc.product_moles,
        state.table,
    )

    return BatchDerivation(
        status=state.status,
        components=components,
        products=products,
        desired_batch=desired,
        comp_results=comp_results,
        total_weight=precursor.total,
        gf_mode=gf_mode,
        gf_results=gf_results,
        gf_total_weight=gf_total,
        product_results=product_results,
        product_total_weight=product_bundle.total,
        calculator_gf=calculator_gf,
        composition=_composition(components),
        warning=warning,
        issues=tuple(issues),
    )


# --- interactive wrapper ----------------------------------------------------


class BatchSession:
    """A single mutable batch session backed by the pure reducer."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()
        self._state = initial_state(self.settings.desired_batch)
        self._derived: BatchDerivation | None = None
        self._load_issue: Issue | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def derived(self) -> BatchDerivation:
        if self._derived is None:
            derived = derive(self._state, self.settings.matrix_tolerance)
            if self._load_issue is not None:
                derived = replace(derived, issues=(self._load_issue, *derived.issues))
            self._derived = derived
        return self._derived

    def dispatch(self, event: Event) -> BatchDerivation:
        self._state = reduce(self._state, event)
        self._derived = None
        return self.derived

    def load_table(self, source: AtomicLookup | str | Path | None = None) -> bool:
        """Load the periodic table once; on failure stay uninitialized."""
        if self._state.table is not None:
            logger.debug("Periodic table already loaded")
            return True
        try:
            if isinstance(source, AtomicLookup):
                table = source
            else:
                table = load_atomic_table(source or self.settings.periodic_table_path)
        except TableLoadError as exc:
            logger.error("Periodic table load failed: %s", exc)
            self._load_issue = Issue(IssueKind.TABLE_LOAD_FAILURE, str(exc))
            self._derived = None
            return False
        self._load_issue = None
        self.dispatch(TableLoaded(table))
        return True


__all__ = [
    "SessionStatus",
    "SessionState",
    "GFCalculatorInputs",
    "BatchDerivation",
    "BatchSession",
    "Event",
    "TableLoaded",
    "LoadRecipe",
    "AddComponent",
    "RemoveComponent",
    "SetComponentCount",
    "EditComponentFormula",
    "EditComponentMatrix",
    "EditProductFormula",
    "EditProductPrecursor",
    "EditProductMoles",
    "SetDesiredBatch",
    "EditGFCalculator",
    "coerce_number",
    "default_components",
    "default_products",
    "derive",
    "initial_state",
    "matrix_warning",
    "reduce",
    "sync_products",
]
