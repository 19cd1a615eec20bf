"""Tests for the material registry service."""

import logging
from decimal import Decimal

import pytest

from inventory_ledger.models import RawMaterial, StockMovement
from inventory_ledger.services import material_registry
from inventory_ledger.services.exceptions import (
    RawMaterialNotFound,
    SupplierNotFoundError,
    ValidationError,
)
from inventory_ledger.services.purchase_ledger import find_orphaned_purchases
from inventory_ledger.services.reconciliation_service import create_purchase


class TestCoerceMinStock:
    """Tests for the min_stock fallback."""

    @pytest.mark.parametrize("value", [None, "", "abc", True])
    def test_falls_back_to_default(self, value):
        assert material_registry.coerce_min_stock(value) == Decimal("10")

    def test_keeps_numeric_values(self):
        assert material_registry.coerce_min_stock("25") == Decimal("25")
        assert material_registry.coerce_min_stock(0) == Decimal("0")


class TestCreateMaterial:
    """Tests for create_material()."""

    def test_create_with_defaults(self, store):
        """Opening stock and price default to zero, threshold to 10."""
        material = material_registry.create_material(store, name="  Brass Hinges ")

        assert material.id is not None
        assert material.name == "Brass Hinges"
        assert material.name_key == "brass hinges"
        assert material.quantity == Decimal("0")
        assert material.unit_price == Decimal("0")
        assert material.min_stock == Decimal("10")

    def test_non_numeric_min_stock_uses_default(self, store):
        material = material_registry.create_material(store, name="Glue", min_stock="n/a")
        assert material.min_stock == Decimal("10")

    def test_all_fields(self, store, sample_supplier):
        material = material_registry.create_material(
            store,
            name="Cotton Fabric",
            quantity="12.5",
            unit_price=150,
            min_stock=20,
            category="Fabric",
            unit="m",
            supplier_id=sample_supplier.id,
            notes="Bleached",
        )

        assert material.quantity == Decimal("12.5")
        assert material.category == "Fabric"
        assert material.unit == "m"
        assert material.supplier_id == sample_supplier.id
        assert material.stock_value == Decimal("1875.0")

    def test_missing_name_raises(self, store):
        with pytest.raises(ValidationError) as exc_info:
            material_registry.create_material(store, name="   ")
        assert exc_info.value.errors == ["name: This field is required"]

    def test_negative_quantity_raises(self, store):
        with pytest.raises(ValidationError) as exc_info:
            material_registry.create_material(store, name="Glue", quantity=-1, unit_price="x")
        assert "quantity: Cannot be negative" in exc_info.value.errors
        assert "unit_price: Must be a valid number" in exc_info.value.errors

    def test_unknown_supplier_raises(self, store):
        with pytest.raises(SupplierNotFoundError):
            material_registry.create_material(store, name="Glue", supplier_id=404)
        assert store.get_all(RawMaterial) == []


class TestFindByName:
    """Tests for find_by_name()."""

    def test_matches_case_insensitively(self, store):
        created = material_registry.create_material(store, name="Teak Wood")
        assert material_registry.find_by_name(store, "TEAK WOOD") == created
        assert material_registry.find_by_name(store, " teak   wood") == created

    def test_no_match_returns_none(self, store):
        material_registry.create_material(store, name="Teak Wood")
        assert material_registry.find_by_name(store, "Teak") is None

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_blank_name_returns_none(self, store, name):
        assert material_registry.find_by_name(store, name) is None

    def test_duplicates_return_oldest_with_warning(self, store, caplog):
        """Several materials with the same key resolve to the first one created."""
        first = material_registry.create_material(store, name="Teak Wood")
        material_registry.create_material(store, name="teak wood")

        with caplog.at_level(logging.WARNING):
            found = material_registry.find_by_name(store, "Teak Wood")

        assert found == first
        assert "find_by_name: duplicate_names" in caplog.text


class TestApplyDelta:
    """Tests for apply_delta()."""

    def test_adds_delta_and_overwrites_price(self, store):
        material_registry.create_material(store, name="Teak Wood", quantity=100, unit_price=800)

        material = material_registry.apply_delta(store, "teak wood", 50, 850)

        assert material.quantity == Decimal("150")
        assert material.unit_price == Decimal("850")

    def test_negative_delta_is_not_clamped(self, store):
        material_registry.create_material(store, name="Teak Wood", quantity=5, unit_price=800)
        material = material_registry.apply_delta(store, "Teak Wood", -8, 800)
        assert material.quantity == Decimal("-3")

    def test_unknown_name_raises(self, store):
        with pytest.raises(RawMaterialNotFound) as exc_info:
            material_registry.apply_delta(store, "Mahogany", 1, 1)
        assert "Mahogany" in str(exc_info.value)


class TestUpdateAndDelete:
    """Tests for direct edits and deletion."""

    def test_update_fields(self, store):
        material = material_registry.create_material(store, name="Teak Wood", quantity=10)

        updated = material_registry.update_material(
            store, material.id, {"name": "Teak Planks", "quantity": "7", "min_stock": "abc"}
        )

        assert updated.name == "Teak Planks"
        assert updated.name_key == "teak planks"
        assert updated.quantity == Decimal("7")
        assert updated.min_stock == Decimal("10")

    def test_update_rejects_unknown_fields(self, store):
        material = material_registry.create_material(store, name="Teak Wood")
        with pytest.raises(ValidationError) as exc_info:
            material_registry.update_material(store, material.id, {"uuid": "x", "quantity": -1})
        assert "uuid: Cannot be edited" in exc_info.value.errors
        assert "quantity: Cannot be negative" in exc_info.value.errors

    def test_update_missing_material_raises(self, store):
        with pytest.raises(RawMaterialNotFound):
            material_registry.update_material(store, 404, {"notes": "gone"})

    def test_rename_orphans_existing_purchases(self, store, make_draft):
        """Renaming a material breaks the name link for its purchases."""
        create_purchase(store, make_draft())
        material = material_registry.find_by_name(store, "Teak Wood")

        material_registry.update_material(store, material.id, {"name": "Burma Teak"})

        assert len(find_orphaned_purchases(store)) == 1

    def test_delete_material(self, store):
        material = material_registry.create_material(store, name="Teak Wood")
        material_registry.delete_material(store, material.id)
        assert store.get_all(RawMaterial) == []

    def test_delete_missing_material_raises(self, store):
        with pytest.raises(RawMaterialNotFound):
            material_registry.delete_material(store, 404)

    def test_delete_keeps_movements(self, store, make_draft):
        """Audit rows outlive the material they describe."""
        create_purchase(store, make_draft())
        material = material_registry.find_by_name(store, "Teak Wood")
        material_id = material.id
        assert len(material_registry.get_material_movements(store, material_id)) == 1

        material_registry.delete_material(store, material_id)

        movements = store.get_all(StockMovement)
        assert len(movements) == 1
        assert movements[0].material_name == "Teak Wood"


class TestListMaterials:
    """Tests for list_materials()."""

    def test_lists_in_insertion_order(self, store):
        material_registry.create_material(store, name="Zinc Sheet", category="Metal")
        material_registry.create_material(store, name="Ash Wood", category="Wood")
        material_registry.create_material(store, name="Copper Wire", category="Metal")

        assert [m.name for m in material_registry.list_materials(store)] == [
            "Zinc Sheet",
            "Ash Wood",
            "Copper Wire",
        ]
        assert [m.name for m in material_registry.list_materials(store, category="Metal")] == [
            "Zinc Sheet",
            "Copper Wire",
        ]

    def test_get_material(self, store):
        material = material_registry.create_material(store, name="Ash Wood")
        assert material_registry.get_material(store, material.id) == material
        with pytest.raises(RawMaterialNotFound):
            material_registry.get_material(store, material.id + 1)
