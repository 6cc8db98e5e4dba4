from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Tuple

import pandas as pd
from loguru import logger

from .config import CATALOG_PATH, CatalogEntry
from .normalize import basic_clean


# ---------------------------
# Column detection / standardization
# ---------------------------

# Catalog files come from hand-edited JSON; accept a few spellings per field.
COLUMN_CANDIDATES: Dict[str, List[str]] = {
    "id": ["id", "ID", "deal_id", "item_id"],
    "name": ["name", "Name", "business", "business_name", "title"],
    "category": ["category", "Category", "type", "cuisine"],
    "location": ["location", "Location", "address", "Address"],
    "deal": ["deal", "Deal", "offer", "Offer", "discount"],
    "description": ["description", "Description", "details", "summary"],
}

TEXT_COLUMNS: List[str] = ["name", "category", "location", "deal", "description"]
REQUIRED_COLUMNS: List[str] = ["id", "name"]
CANONICAL_COLUMNS: List[str] = ["id"] + TEXT_COLUMNS


def _standardize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Rename raw catalog columns to the canonical schema:
    id, name, category, location, deal, description.

    Columns that match nothing are left alone and end up as extra fields.
    """
    col_map: Dict[str, str] = {}
    lower_to_original = {str(c).lower(): c for c in df.columns}

    for canon, candidates in COLUMN_CANDIDATES.items():
        for candidate in candidates:
            if candidate in df.columns:
                col_map[candidate] = canon
                break
            cand_lower = candidate.lower()
            if cand_lower in lower_to_original:
                col_map[lower_to_original[cand_lower]] = canon
                break

    logger.debug("Standardizing catalog columns with map: {}", col_map)
    return df.rename(columns=col_map)


# ---------------------------
# Field parsing helpers
# ---------------------------

def _coerce_id(value: Any) -> int | None:
    """Integral ids only; '7', 7 and 7.0 are fine, 7.5 and 'abc' are not."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        return None
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        as_float = float(text)
    except ValueError:
        return None
    if not as_float.is_integer():
        return None
    return int(as_float)


# ---------------------------
# Catalog normalization
# ---------------------------

def normalize_catalog_df(df_raw: pd.DataFrame) -> pd.DataFrame:
    """
    Normalize a raw catalog frame into the canonical schema.

    - canonical columns first (id, name, category, location, deal, description),
      extra columns after them
    - text fields whitespace-cleaned, missing text becomes ""
    - rows without a usable integer id are dropped with a warning
    - duplicate ids raise ValueError
    - file order is preserved (it breaks ranking ties)
    """
    logger.info("Normalizing catalog dataframe with {} raw rows", len(df_raw))

    if df_raw.empty and len(df_raw.columns) == 0:
        return pd.DataFrame(columns=CANONICAL_COLUMNS)

    df = _standardize_columns(df_raw.copy())

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Catalog is missing required columns: {missing}")

    for col in TEXT_COLUMNS:
        if col not in df.columns:
            df[col] = ""
        df[col] = df[col].fillna("").apply(basic_clean)

    # object dtype keeps ids above 2**53 exact (no float round trip)
    df["id"] = pd.Series([_coerce_id(v) for v in df["id"]], index=df.index, dtype=object)
    bad = df["id"].isna()
    if bad.any():
        logger.warning("Dropping {} catalog rows without a valid integer id", int(bad.sum()))
        df = df[~bad].copy()
    df["id"] = df["id"].astype(int)

    dupes = df["id"][df["id"].duplicated()].unique().tolist()
    if dupes:
        raise ValueError(f"Catalog ids must be unique; duplicated: {sorted(dupes)}")

    extras = [c for c in df.columns if c not in CANONICAL_COLUMNS]
    df_out = df[CANONICAL_COLUMNS + extras].reset_index(drop=True)

    logger.info("Catalog normalization complete. Final rows: {}", len(df_out))
    return df_out


def entries_from_df(df: pd.DataFrame) -> Tuple[CatalogEntry, ...]:
    """Build immutable CatalogEntry records from a normalized catalog frame."""
    entries: List[CatalogEntry] = []
    for record in df.to_dict(orient="records"):
        fields = {
            str(k): v
            for k, v in record.items()
            if k in CANONICAL_COLUMNS or not _is_missing(v)
        }
        fields["id"] = int(fields["id"])
        entries.append(CatalogEntry(**fields))
    return tuple(entries)


def _is_missing(value: Any) -> bool:
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # list-like extras
        return False


# ---------------------------
# IO helpers
# ---------------------------

def load_catalog(path: Path = CATALOG_PATH) -> Tuple[CatalogEntry, ...]:
    """
    Load the deal catalog (a JSON array of objects) into immutable entries.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    logger.info("Loading catalog from {}", path)
    df_raw = pd.read_json(path, orient="records", dtype=False, convert_dates=False)
    entries = entries_from_df(normalize_catalog_df(df_raw))
    logger.info("Loaded catalog with {} entries", len(entries))
    return entries
