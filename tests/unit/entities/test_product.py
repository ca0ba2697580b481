"""Unit tests for the product entity and its request models."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from src.catalog.entities.category import CategorySummary
from src.catalog.entities.product import Product, ProductCreate, ProductTable


def _product(**overrides) -> Product:
    fields = {
        "id": 1,
        "name": "Laptop",
        "price": Decimal("999.99"),
        "categories": [CategorySummary(id=1, name="Electronics")],
    }
    fields.update(overrides)
    return Product(**fields)


class TestProduct:
    def test_defaults(self):
        product = _product()

        assert product.in_stock is True
        assert product.sku is None
        assert product.category_ids == [1]

    def test_equality_ignores_timestamps(self):
        earlier = datetime(2024, 1, 1, tzinfo=timezone.utc)

        assert _product(created_at=earlier, updated_at=earlier) == _product()

    def test_equality_compares_categories(self):
        other = _product(categories=[CategorySummary(id=2, name="Clothing")])

        assert _product() != other

    def test_not_equal_to_other_types(self):
        assert _product() != {"id": 1}

    def test_naive_timestamps_are_treated_as_utc(self):
        product = _product(created_at=datetime(2024, 5, 1, 12, 0))

        assert product.created_at.tzinfo is not None
        assert product.created_at.hour == 12

    def test_aware_timestamps_are_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        product = _product(updated_at=datetime(2024, 5, 1, 12, 0, tzinfo=plus_two))

        assert product.updated_at.hour == 10
        assert product.updated_at.utcoffset() == timedelta(0)

    def test_from_table_row(self):
        row = ProductTable(id=3, name="Desk", price=Decimal("120.00"), sku="DESK-1", in_stock=False)

        product = Product.model_validate(row, from_attributes=True)

        assert product.id == 3
        assert product.sku == "DESK-1"
        assert product.in_stock is False
        assert product.categories == []

    def test_serializes_price_as_string(self):
        assert _product().model_dump(mode="json")["price"] == "999.99"


class TestProductCreate:
    def test_blank_sku_becomes_none(self):
        request = ProductCreate(name="Pen", price=Decimal("1.50"), sku="", category_ids=[1])

        assert request.sku is None

    def test_category_ids_keep_first_occurrence_order(self):
        request = ProductCreate(name="Pen", price=Decimal("1.50"), category_ids=[5, 2, 5, 1])

        assert request.category_ids == [5, 2, 1]

    def test_price_digit_limits(self):
        with pytest.raises(ValidationError):
            ProductCreate(name="Yacht", price=Decimal("123456789.00"), category_ids=[1])
