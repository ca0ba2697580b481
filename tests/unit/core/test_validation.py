"""Unit tests for request validation."""

from decimal import Decimal

import pytest

from src.catalog.core.errors import ValidationFailed
from src.catalog.core.validation import (
    validate_category_create,
    validate_category_update,
    validate_product_create,
    validate_product_update,
)
from src.catalog.entities.product import ProductUpdate


def _fields(exc_info) -> set[str]:
    return {violation.field for violation in exc_info.value.violations}


class TestProductCreateValidation:
    def test_valid_payload_is_normalized(self):
        request = validate_product_create(
            {
                "name": "  Laptop  ",
                "price": "999.99",
                "sku": "  LAP-1 ",
                "category_ids": [3, 1, 3, 2, 1],
            }
        )

        assert request.name == "Laptop"
        assert request.price == Decimal("999.99")
        assert request.sku == "LAP-1"
        assert request.category_ids == [3, 1, 2]
        assert request.in_stock is True
        assert request.description is None

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"name": ""}, "name"),
            ({"name": "x" * 256}, "name"),
            ({"price": "-0.01"}, "price"),
            ({"price": "1.234"}, "price"),
            ({"price": "not-a-number"}, "price"),
            ({"sku": "S" * 51}, "sku"),
            ({"category_ids": []}, "category_ids"),
        ],
    )
    def test_rejects_invalid_field(self, overrides, field):
        payload = {"name": "Laptop", "price": "10.00", "category_ids": [1]}
        payload.update(overrides)

        with pytest.raises(ValidationFailed) as exc_info:
            validate_product_create(payload)

        assert _fields(exc_info) == {field}

    @pytest.mark.parametrize("category_ids", [[True], [1, False], ["1"]])
    def test_category_ids_must_be_integers(self, category_ids):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_product_create(
                {"name": "Laptop", "price": "10.00", "category_ids": category_ids}
            )

        assert all(v.field.startswith("category_ids") for v in exc_info.value.violations)

    def test_missing_required_fields_are_all_reported(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_product_create({})

        assert _fields(exc_info) == {"name", "price", "category_ids"}

    def test_zero_price_is_allowed(self):
        assert validate_product_create(
            {"name": "Free sample", "price": 0, "category_ids": [1]}
        ).price == Decimal("0")

    def test_non_mapping_payload(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_product_create(["not", "an", "object"])

        assert _fields(exc_info) == {"request"}


class TestProductUpdateValidation:
    def test_empty_update_changes_nothing(self):
        request = validate_product_update({})

        assert request.changes() == {}
        assert request.replaces_categories is False

    def test_explicit_nulls_are_kept_for_optional_fields(self):
        request = validate_product_update({"description": None, "sku": None})

        assert request.changes() == {"description": None, "sku": None}

    @pytest.mark.parametrize("field", ["name", "price", "in_stock"])
    def test_required_fields_cannot_be_nulled(self, field):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_product_update({field: None})

        assert _fields(exc_info) == {field}
        assert "cannot be null" in exc_info.value.violations[0].message

    def test_category_ids_presence(self):
        assert validate_product_update({"category_ids": []}).replaces_categories is True
        assert validate_product_update({"category_ids": None}).replaces_categories is False
        assert validate_product_update({"name": "X"}).replaces_categories is False

    def test_update_rejects_boolean_category_ids(self):
        with pytest.raises(ValidationFailed):
            validate_product_update({"category_ids": [True]})

    def test_category_ids_are_not_row_changes(self):
        request = validate_product_update({"price": "5.00", "category_ids": [2, 2]})

        assert request.changes() == {"price": Decimal("5.00")}
        assert request.category_ids == [2]

    def test_model_instance_keeps_presence_information(self):
        request = validate_product_update(ProductUpdate(name="Renamed"))

        assert request.changes() == {"name": "Renamed"}
        assert request.replaces_categories is False


class TestCategoryValidation:
    def test_create_strips_name(self):
        assert validate_category_create({"name": " Books "}).name == "Books"

    @pytest.mark.parametrize("name", ["", "   ", "n" * 101])
    def test_create_rejects_bad_name(self, name):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_category_create({"name": name})

        assert _fields(exc_info) == {"name"}

    def test_update_rejects_null_name(self):
        with pytest.raises(ValidationFailed):
            validate_category_update({"name": None})

    def test_update_allows_clearing_description(self):
        assert validate_category_update({"description": None}).changes() == {
            "description": None
        }

    def test_violation_payload_shape(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_category_create({"name": ""})

        body = exc_info.value.to_dict()
        assert body["error"] == "ValidationFailed"
        assert body["violations"][0]["field"] == "name"
