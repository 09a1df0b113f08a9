"""Test price/value rounding and line-item normalization."""

import pytest

from ga4_tracker.core.errors import InvalidArgumentError
from ga4_tracker.core.models import EcommerceItem
from ga4_tracker.tracking.normalize import (
    normalize_item,
    normalize_items,
    round_money,
    round_whole,
)


class TestRoundMoney:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (9.005, 9.01),
            (1.005, 1.01),
            (2.675, 2.68),
            (19.994, 19.99),
            (10, 10.0),
            ("4.125", 4.13),
            (-1.005, -1.01),
        ],
    )
    def test_half_up(self, raw, expected):
        assert round_money(raw) == expected

    @pytest.mark.parametrize("bad", ["abc", None, float("nan"), float("inf"), True])
    def test_rejects_non_numbers(self, bad):
        with pytest.raises(InvalidArgumentError):
            round_money(bad)


class TestRoundWhole:
    def test_half_up(self):
        assert round_whole(2.5) == 3
        assert round_whole(1234.4) == 1234
        assert round_whole(0.5) == 1


class TestNormalizeItem:
    def test_quantity_defaults_to_one(self):
        assert normalize_item({"item_id": "A", "price": 5})["quantity"] == 1

    def test_zero_quantity_defaults_to_one(self):
        assert normalize_item({"item_id": "A", "price": 5, "quantity": 0})["quantity"] == 1

    def test_explicit_quantity_kept(self):
        assert normalize_item({"item_id": "A", "price": 5, "quantity": 3})["quantity"] == 3

    def test_negative_quantity_rejected(self):
        with pytest.raises(InvalidArgumentError, match="quantity"):
            normalize_item({"item_id": "A", "price": 5, "quantity": -2})

    def test_quantity_ceiling(self):
        assert normalize_item({"price": 1, "quantity": 999_999})["quantity"] == 999_999
        with pytest.raises(InvalidArgumentError, match="maximum"):
            normalize_item({"price": 1, "quantity": 1_000_000})

    def test_price_rounded(self):
        assert normalize_item({"price": 9.005})["price"] == 9.01

    def test_other_fields_pass_through(self):
        out = normalize_item(
            {
                "item_id": "SKU",
                "item_name": "Hat",
                "item_category3": "Winter",
                "discount": 1.5,
                "custom_dimension": "blue",
                "price": 20,
            }
        )
        assert out["item_category3"] == "Winter"
        assert out["discount"] == 1.5
        assert out["custom_dimension"] == "blue"

    def test_absent_optional_fields_omitted(self):
        out = normalize_item({"item_id": "SKU", "price": 1})
        assert set(out) == {"item_id", "price", "quantity"}

    def test_model_input(self):
        out = normalize_item(EcommerceItem(item_id="SKU", price=3.333, quantity=4))
        assert out == {"item_id": "SKU", "price": 3.33, "quantity": 4}

    def test_missing_price_rejected(self):
        with pytest.raises(InvalidArgumentError, match="Invalid item"):
            normalize_item({"item_id": "SKU"})


class TestNormalizeItems:
    def test_none_is_empty(self):
        assert normalize_items(None) == []

    def test_preserves_order(self, sample_items):
        out = normalize_items(sample_items)
        assert [i["item_id"] for i in out] == ["SKU_123", "SKU_456"]
        assert out[0]["price"] == 90.0
        assert out[1]["price"] == 9.01
