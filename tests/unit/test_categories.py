"""Unit tests for the categorizer and taxonomy loading"""

import json

import pytest

from sms_gateway.domain.categories import Categorizer, load_taxonomy
from sms_gateway.domain.exceptions import InvalidTaxonomyError


@pytest.mark.parametrize(
    "counterparty,expected",
    [
        ("Amazon Retail", "Shopping"),
        ("Swiggy", "Food"),
        ("Ola", "Transport"),
        ("Airtel", "Bills"),
        ("Netflix", "Entertainment"),
        ("Apollo Pharmacy", "Healthcare"),
        ("Random Person", "Other"),
        ("", "Other"),
    ],
)
def test_categorize(counterparty, expected):
    """Test first matching category wins, default Other"""
    assert Categorizer().categorize(counterparty) == expected


def test_short_keywords_match_whole_words_only():
    """Test "ola" does not categorise Motorola as transport"""
    assert Categorizer().categorize("Motorola Store") == "Shopping"


def test_lookup_by_id_and_name():
    """Test id and case-insensitive name lookup with Other fallback"""
    categorizer = Categorizer()
    assert categorizer.get_by_id("food").display_name == "Food"
    assert categorizer.get_by_id("unknown").display_name == "Other"
    assert categorizer.get_by_name("HEALTHCARE").id == "healthcare"
    assert categorizer.get_by_name("transport").display_name == "Transport"
    assert categorizer.get_by_name("Groceries").id == "other"


def test_load_taxonomy_preserves_order_and_adds_other(tmp_path):
    """Test a configured taxonomy replaces the built-in one"""
    path = tmp_path / "taxonomy.json"
    path.write_text(
        json.dumps(
            [
                {"id": "coffee", "name": "Coffee", "keywords": ["starbucks", "ccd"]},
                {"id": "food", "name": "Food", "keywords": ["starbucks", "swiggy"]},
            ]
        )
    )
    taxonomy = load_taxonomy(path)
    assert [c.id for c in taxonomy] == ["coffee", "food", "other"]

    categorizer = Categorizer(taxonomy)
    assert categorizer.categorize("Starbucks") == "Coffee"
    assert categorizer.categorize("Zomato") == "Other"


def test_load_taxonomy_rejects_bad_files(tmp_path):
    """Test unreadable or malformed taxonomy files raise InvalidTaxonomyError"""
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(InvalidTaxonomyError):
        load_taxonomy(broken)

    wrong_shape = tmp_path / "shape.json"
    wrong_shape.write_text(json.dumps([{"id": "food"}]))
    with pytest.raises(InvalidTaxonomyError):
        load_taxonomy(wrong_shape)

    with pytest.raises(InvalidTaxonomyError):
        load_taxonomy(tmp_path / "missing.json")
