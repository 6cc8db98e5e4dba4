import json

import pandas as pd
import pytest
from pydantic import ValidationError

from dealbot.catalog import entries_from_df, load_catalog, normalize_catalog_df
from dealbot.config import DEFAULT_CATALOG_PATH, CatalogEntry
from dealbot.matching import find_matches


def test_normalize_catalog_standardizes_columns_and_keeps_extras():
    raw = pd.DataFrame(
        {
            "ID": [1, 2],
            "title": ["Slice of Heaven", "Burger Barn"],
            "type": ["pizza", "burgers"],
            "offer": ["20% off", "Free fries"],
            "address": ["88 Elm Avenue", "5 Harbor Road"],
            "details": ["  Wood   fired\npizza ", None],
            "rating": [4.5, None],
        }
    )

    df = normalize_catalog_df(raw)

    assert list(df.columns) == ["id", "name", "category", "location", "deal", "description", "rating"]
    assert df.loc[0, "description"] == "Wood fired pizza"
    assert df.loc[1, "description"] == ""


def test_normalize_catalog_fills_missing_text_columns():
    raw = pd.DataFrame({"id": [1], "name": ["Taco Loco"]})
    df = normalize_catalog_df(raw)
    row = df.iloc[0]
    assert row["category"] == ""
    assert row["deal"] == ""
    assert row["description"] == ""


def test_normalize_catalog_drops_rows_without_valid_id():
    raw = pd.DataFrame(
        {
            "id": [1, "abc", None, "4", 5.5],
            "name": ["A", "B", "C", "D", "E"],
        }
    )
    df = normalize_catalog_df(raw)
    assert df["id"].tolist() == [1, 4]
    assert df["name"].tolist() == ["A", "D"]


def test_normalize_catalog_keeps_large_ids_exact():
    raw = pd.DataFrame(
        {
            "id": ["12345678901234567", 12345678901234569, None, 7.0],
            "name": ["A", "B", "C", "D"],
        }
    )
    df = normalize_catalog_df(raw)
    assert df["id"].tolist() == [12345678901234567, 12345678901234569, 7]

    entries = entries_from_df(df)
    assert [e.id for e in entries] == [12345678901234567, 12345678901234569, 7]


def test_normalize_catalog_rejects_duplicate_ids():
    raw = pd.DataFrame({"id": [1, 1], "name": ["A", "B"]})
    with pytest.raises(ValueError):
        normalize_catalog_df(raw)


def test_normalize_catalog_requires_name():
    raw = pd.DataFrame({"id": [1], "category": ["pizza"]})
    with pytest.raises(ValueError):
        normalize_catalog_df(raw)


def test_entries_from_df_are_frozen_and_carry_extras():
    raw = pd.DataFrame(
        {
            "id": [1, 2],
            "name": ["A", "B"],
            "rating": [4.5, None],
        }
    )
    entries = entries_from_df(normalize_catalog_df(raw))

    assert all(isinstance(e, CatalogEntry) for e in entries)
    assert entries[0].rating == 4.5
    assert "rating" not in (entries[1].model_extra or {})

    with pytest.raises(ValidationError):
        entries[0].name = "changed"


def test_load_catalog_from_json(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps(
            [
                {"id": 2, "name": "Slice of Heaven", "category": "pizza", "location": "Elm",
                 "deal": "20% off", "description": "Wood fired pizza"},
                {"id": 1, "name": "Bean There Cafe", "category": "coffee", "location": "Market",
                 "deal": "BOGO latte", "description": "Specialty coffee"},
            ]
        ),
        encoding="utf-8",
    )

    catalog = load_catalog(path)
    assert isinstance(catalog, tuple)
    # file order is kept
    assert [e.id for e in catalog] == [2, 1]
    assert catalog[1].deal == "BOGO latte"


def test_load_catalog_empty_file(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text("[]", encoding="utf-8")
    assert load_catalog(path) == ()


def test_load_catalog_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_catalog(tmp_path / "nope.json")


def test_bundled_catalog_loads_and_matches():
    catalog = load_catalog(DEFAULT_CATALOG_PATH)
    ids = [e.id for e in catalog]
    assert len(ids) == len(set(ids)) >= 5

    assert [e.name for e in find_matches("pizza", catalog)] == ["Slice of Heaven"]
    assert [e.id for e in find_matches("Hi bot, find coffee near me", catalog)] == [1, 7]
