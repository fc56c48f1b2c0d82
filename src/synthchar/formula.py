"""Chemical formula parsing.

Formulas are read as a flat run of ``Symbol[count]`` tokens, e.g. ``La2O3`` or
``H3BO3``. Parentheses, hydrates and charges are not interpreted; characters
that do not start a token are skipped.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterator, List

from synthchar.models import ElementCount, ParsedFormula
from synthchar.periodic import AtomicLookup

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"([A-Z][a-z]*)(\d*)")


def iter_formula(formula: str) -> Iterator[tuple[str, int]]:
    """Yield ``(symbol, count)`` pairs from left to right."""
    position = 0
    for match in TOKEN_PATTERN.finditer(formula):
        if match.start() != position:
            logger.debug("Ignoring %r in formula %r", formula[position:match.start()], formula)
        symbol, digits = match.groups()
        position = match.end()
        yield symbol, int(digits) if digits else 1
    if position < len(formula):
        logger.debug("Ignoring %r in formula %r", formula[position:], formula)


def parse_formula(formula: str) -> ParsedFormula:
    return tuple(iter_formula(formula))


def element_counts(formula: str) -> Dict[str, int]:
    """Total count per symbol, merging repeated symbols in order of appearance."""
    counts: Dict[str, int] = {}
    for symbol, count in iter_formula(formula):
        counts[symbol] = counts.get(symbol, 0) + count
    return counts


def describe_elements(formula: str, table: AtomicLookup | None) -> List[ElementCount]:
    """Parsed tokens annotated with element names (raw symbol when unknown)."""
    described = []
    for symbol, count in iter_formula(formula):
        entry = table.get(symbol) if table is not None else None
        name = entry.element_name if entry is not None and entry.element_name else symbol
        described.append(ElementCount(symbol=symbol, element_name=name, count=count))
    return described


__all__ = ["TOKEN_PATTERN", "iter_formula", "parse_formula", "element_counts", "describe_elements"]
