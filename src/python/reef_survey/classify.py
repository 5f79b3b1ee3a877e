"""
Code classification.

Maps raw survey codes to semantic classes using the lookup tables in
`config/codes.yml`. Tables are loaded once into a frozen `CodeTables`
whose mappings are read-only views; nothing downstream can mutate them.

What happens to a code with no class is an explicit policy
(`classification.unmapped_codes` in analysis.yml) rather than a side
effect of a failed join:
- "warn": UnmappedCodeWarning, rows classed as "Unclassified"
- "error": UnmappedCodeError
- "exclude": rows dropped before any denominator is counted
"""

from __future__ import annotations

import warnings
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from types import MappingProxyType
from typing import Any

import pandas as pd
from reef_survey.config import load_codes_config
from reef_survey.errors import UnmappedCodeError, UnmappedCodeWarning

UNCLASSIFIED = "Unclassified"


def _freeze(raw: Mapping[Any, Any] | None, table: str) -> Mapping[str, str]:
    out: dict[str, str] = {}
    for code, cls in (raw or {}).items():
        key = str(code).strip().upper()
        if key in out and out[key] != str(cls):
            raise ValueError(f"codes.yml:{table}: code '{key}' mapped to both '{out[key]}' and '{cls}'")
        out[key] = str(cls)
    return MappingProxyType(out)


@dataclass(frozen=True)
class CodeTables:
    """
    Read-only code -> class tables.

    Example
    -------
    >>> tables = CodeTables.from_dict({"benthic_class": {"ofav": "Hard coral"}})
    >>> tables.benthic_class["OFAV"]
    'Hard coral'
    """

    benthic_class: Mapping[str, str]
    algal_type: Mapping[str, str]
    health_status: Mapping[str, str]
    fish_functional_group: Mapping[str, str]
    invert_group: Mapping[str, str]

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "CodeTables":
        return cls(**{f.name: _freeze(raw.get(f.name), f.name) for f in fields(cls)})

    def table(self, name: str) -> Mapping[str, str]:
        if name not in {f.name for f in fields(self)}:
            raise KeyError(f"unknown code table: {name}")
        return getattr(self, name)


def load_code_tables(root: Path) -> CodeTables:
    return CodeTables.from_dict(load_codes_config(root))


def unmapped_codes(df: pd.DataFrame, code_col: str, mapping: Mapping[str, str]) -> list[str]:
    """Sorted distinct non-missing codes in `code_col` with no entry in `mapping`."""
    codes = df[code_col].dropna()
    return sorted({str(c) for c in codes if c not in mapping})


def classify(
    df: pd.DataFrame,
    code_col: str,
    mapping: Mapping[str, str],
    out_col: str,
    table: str,
    policy: str = "warn",
) -> pd.DataFrame:
    """
    Add `out_col` holding the class of each code in `code_col`.

    Missing codes stay missing. Codes absent from `mapping` are handled
    per `policy` (see module docstring). Returns a copy.
    """
    out = df.copy()
    classes = out[code_col].map(dict(mapping)).astype("string")
    unmapped = out[code_col].notna() & classes.isna()
    if unmapped.any():
        bad = sorted({str(c) for c in out.loc[unmapped, code_col]})
        if policy == "error":
            raise UnmappedCodeError(table, bad)
        if policy == "exclude":
            out = out[~unmapped].copy()
            classes = classes[~unmapped]
        else:
            warnings.warn(
                f"codes.yml:{table}: {int(unmapped.sum())} row(s) with unmapped code(s) "
                f"{', '.join(bad)} classed as '{UNCLASSIFIED}'",
                UnmappedCodeWarning,
                stacklevel=2,
            )
            classes = classes.mask(unmapped, UNCLASSIFIED)
    out[out_col] = classes
    return out


def resolve_metadata_codes(
    df: pd.DataFrame,
    code_col: str,
    metadata: pd.DataFrame,
    table: str,
    policy: str = "warn",
    key: str = "code",
    note: str = "kept without metadata",
) -> tuple[pd.DataFrame, pd.Series]:
    """
    Apply the unmapped-code policy to codes with no row in `metadata`.

    Returns the (possibly filtered) rows and a boolean Series marking rows
    whose code has a metadata row. Under "warn" the other rows are kept;
    callers join metadata only onto the marked rows.
    """
    known_codes = {str(c) for c in metadata[key].dropna()}
    codes = df[code_col]
    unknown = codes.notna() & ~codes.isin(known_codes)
    if unknown.any():
        bad = sorted({str(c) for c in codes[unknown]})
        if policy == "error":
            raise UnmappedCodeError(table, bad, source="metadata", missing="metadata row")
        if policy == "exclude":
            df = df[~unknown].copy()
            return df, df[code_col].notna()
        warnings.warn(
            f"metadata/{table}.csv: {int(unknown.sum())} row(s) with code(s) {', '.join(bad)} "
            f"have no metadata row; {note}",
            UnmappedCodeWarning,
            stacklevel=2,
        )
    return df, codes.notna() & ~unknown
