"""
Metadata enrichment.

Joins descriptive metadata (common name, family, parent class,
length-weight coefficients) onto rows by code. The join is strictly
one-to-one per code: duplicate metadata rows or codes with no metadata row
raise MetadataIntegrityError rather than producing duplicated or null rows.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd
from reef_survey.errors import MetadataIntegrityError
from reef_survey.paths import metadata_path


def load_metadata(root: Path, table: str, key: str = "code") -> pd.DataFrame:
    """
    Load a metadata table from config/metadata/<table>.csv with upper-cased codes.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    """
    path = metadata_path(root, table)
    if not path.exists():
        raise FileNotFoundError(f"Metadata table not found: {path}")
    df = pd.read_csv(path)
    if key not in df.columns:
        raise MetadataIntegrityError(f"{path.name}: missing key column '{key}'")
    df[key] = df[key].astype("string").str.strip().str.upper()
    return df


def check_metadata_keys(metadata: pd.DataFrame, key: str) -> None:
    dup = metadata[key].duplicated(keep=False)
    if dup.any():
        codes = sorted({str(c) for c in metadata.loc[dup, key]})
        raise MetadataIntegrityError(f"metadata '{key}': code(s) with multiple rows: {', '.join(codes)}")
    if metadata[key].isna().any():
        raise MetadataIntegrityError(f"metadata '{key}': row(s) with no code")


def join_metadata(
    df: pd.DataFrame,
    metadata: pd.DataFrame,
    key: str = "code",
    df_key: str | None = None,
    columns: list[str] | None = None,
    rows: pd.Series | None = None,
) -> pd.DataFrame:
    """
    Left-join `columns` of `metadata` onto `df` matching `df[df_key]` to `metadata[key]`.

    Rows of `df` with a missing code are kept with empty metadata. Row count
    and order of `df` are preserved. With a boolean `rows` mask only those
    rows are joined (and checked); the rest get empty metadata.
    """
    df_key = df_key or key
    columns = columns or [c for c in metadata.columns if c != key]
    check_metadata_keys(metadata, key)

    clash = [c for c in columns if c in df.columns]
    if clash:
        raise ValueError(f"join_metadata: column(s) already present: {', '.join(clash)}")

    if rows is not None:
        out = df.copy()
        joined = join_metadata(df[rows], metadata, key=key, df_key=df_key, columns=columns)
        for c in columns:
            out[c] = joined[c]
        return out

    codes = {str(c) for c in df[df_key].dropna().unique()}
    known = {str(c) for c in metadata[key]}
    unknown = sorted(codes - known)
    if unknown:
        raise MetadataIntegrityError(f"metadata '{key}': no row for code(s): {', '.join(unknown)}")

    right = metadata[[key] + columns].copy()
    right[key] = right[key].astype(str)
    left = df.copy()
    left["_join_code"] = left[df_key].astype("string").astype(object)
    merged = left.merge(right, left_on="_join_code", right_on=key, how="left",
                        validate="many_to_one", suffixes=("", "_meta"))
    drop = ["_join_code"] + ([f"{key}_meta"] if f"{key}_meta" in merged.columns else [])
    if df_key != key and key in merged.columns and key not in df.columns:
        drop.append(key)
    merged = merged.drop(columns=drop)
    merged.index = df.index
    return merged
