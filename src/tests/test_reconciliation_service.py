"""Tests for purchase reconciliation.

Covers the stock effects of creating, editing and deleting purchases, the
single unit of work around each ledger and registry write pair, and the
audit trail written alongside.
"""

import logging
from decimal import Decimal

import pytest

from inventory_ledger.models import MovementReason, Purchase, RawMaterial, StockMovement, StockStatus
from inventory_ledger.services import material_registry, purchase_ledger
from inventory_ledger.services.exceptions import (
    PurchaseNotFound,
    StorageError,
    SupplierNotFoundError,
    ValidationError,
)
from inventory_ledger.services.reconciliation_service import (
    create_purchase,
    delete_purchase,
    update_purchase,
)
from inventory_ledger.services.stock_classifier import classify_material


def _fail_for(model, original):
    """Wrap a store write so it raises StorageError for one model."""

    def _write(record):
        if isinstance(record, model):
            raise StorageError(f"injected failure writing {model.__name__}")
        return original(record)

    return _write


class TestCreatePurchase:
    """Tests for create_purchase()."""

    def test_first_purchase_creates_material(self, store, make_draft):
        """Teak Wood 100 @ 800 creates the material with default threshold."""
        purchase = create_purchase(store, make_draft())

        assert purchase.id is not None
        assert purchase.total_amount == Decimal("80000.00")

        materials = store.get_all(RawMaterial)
        assert len(materials) == 1
        material = materials[0]
        assert material.name == "Teak Wood"
        assert material.quantity == Decimal("100")
        assert material.unit_price == Decimal("800")
        assert material.min_stock == Decimal("10")

    def test_new_material_takes_purchase_supplier(self, store, make_draft, sample_supplier):
        """Auto-created materials remember who supplied them."""
        create_purchase(store, make_draft())
        material = material_registry.find_by_name(store, "Teak Wood")
        assert material.supplier_id == sample_supplier.id

    def test_second_purchase_matches_case_insensitively(self, store, make_draft):
        """A differently-cased name adds to the same material, last price wins."""
        create_purchase(store, make_draft())
        create_purchase(store, make_draft(material_name="teak wood", quantity=50, price_per_unit=850))

        materials = store.get_all(RawMaterial)
        assert len(materials) == 1
        assert materials[0].quantity == Decimal("150")
        assert materials[0].unit_price == Decimal("850")

    def test_whitespace_variants_match_same_material(self, store, make_draft):
        """Extra spaces in the name do not create a second material."""
        create_purchase(store, make_draft())
        create_purchase(store, make_draft(material_name="  TEAK   wood ", quantity=5))

        assert len(store.get_all(RawMaterial)) == 1
        assert material_registry.find_by_name(store, "teak wood").quantity == Decimal("105")

    def test_purchase_for_existing_material_keeps_threshold(self, store, make_draft):
        """Receiving stock does not reset a custom min_stock."""
        material_registry.create_material(store, name="Teak Wood", quantity=5, unit_price=700, min_stock=40)

        create_purchase(store, make_draft(quantity=10))

        material = material_registry.find_by_name(store, "Teak Wood")
        assert material.quantity == Decimal("15")
        assert material.min_stock == Decimal("40")
        assert material.unit_price == Decimal("800")

    def test_total_amount_rounded_to_cents(self, store, make_draft):
        """Fractional totals are rounded half up to two decimals."""
        purchase = create_purchase(store, make_draft(quantity="2.5", price_per_unit="10.333"))
        assert purchase.total_amount == Decimal("25.83")

    def test_accepts_purchase_draft_instance(self, store, sample_supplier):
        """A PurchaseDraft works the same as a mapping."""
        draft = purchase_ledger.PurchaseDraft(
            supplier_id=sample_supplier.id,
            material_name="Cotton Fabric",
            quantity=20,
            price_per_unit=150,
        )
        purchase = create_purchase(store, draft)
        assert purchase.payment_status == "Unpaid"
        assert material_registry.find_by_name(store, "cotton fabric").quantity == Decimal("20")

    def test_records_stock_movement(self, store, make_draft):
        """Each create writes one audit row with the resulting quantity."""
        purchase = create_purchase(store, make_draft())

        movements = store.get_all(StockMovement)
        assert len(movements) == 1
        assert movements[0].purchase_id == purchase.id
        assert movements[0].reason == MovementReason.PURCHASE_CREATED.value
        assert movements[0].quantity_delta == Decimal("100")
        assert movements[0].quantity_after == Decimal("100")

    def test_validation_failure_writes_nothing(self, store, make_draft):
        """Invalid drafts raise before touching the ledger or registry."""
        with pytest.raises(ValidationError) as exc_info:
            create_purchase(store, make_draft(quantity=0, price_per_unit=-1, material_name=" "))

        assert len(exc_info.value.errors) == 3
        assert store.get_all(Purchase) == []
        assert store.get_all(RawMaterial) == []

    def test_unknown_supplier_writes_nothing(self, store, make_draft):
        """An unresolved supplier reference fails before any write."""
        with pytest.raises(SupplierNotFoundError):
            create_purchase(store, make_draft(supplier_id=9999))

        assert store.get_all(Purchase) == []
        assert store.get_all(RawMaterial) == []

    def test_registry_failure_surfaces_storage_error(self, store, make_draft, monkeypatch):
        """A failed registry write raises StorageError and undoes the ledger write.

        Both writes share one unit of work, so the purchase is rolled back too
        rather than left persisted with stock unchanged.
        """
        create_purchase(store, make_draft())
        monkeypatch.setattr(store, "update_item", _fail_for(RawMaterial, store.update_item))

        with pytest.raises(StorageError):
            create_purchase(
                store, make_draft(material_name="teak wood", quantity=50, price_per_unit=850)
            )

        assert len(store.get_all(Purchase)) == 1
        material = material_registry.find_by_name(store, "Teak Wood")
        assert material.quantity == Decimal("100")
        assert material.unit_price == Decimal("800")
        assert len(store.get_all(StockMovement)) == 1

    def test_material_creation_failure_rolls_back_purchase(self, store, make_draft, monkeypatch):
        """A failed auto-create leaves neither a purchase nor a material."""
        monkeypatch.setattr(store, "add_item", _fail_for(RawMaterial, store.add_item))

        with pytest.raises(StorageError):
            create_purchase(store, make_draft())

        assert store.get_all(Purchase) == []
        assert store.get_all(RawMaterial) == []

    def test_storage_error_is_logged(self, store, make_draft, monkeypatch, caplog):
        """Storage failures are logged at ERROR before propagating."""
        monkeypatch.setattr(store, "add_item", _fail_for(RawMaterial, store.add_item))

        with caplog.at_level(logging.ERROR):
            with pytest.raises(StorageError):
                create_purchase(store, make_draft())

        assert "create_purchase: storage_error" in caplog.text


class TestUpdatePurchase:
    """Tests for update_purchase()."""

    def test_quantity_increase_adds_difference(self, store, make_draft):
        """Editing quantity 10 -> 15 adds exactly 5."""
        purchase = create_purchase(store, make_draft(quantity=10))

        update_purchase(store, purchase.id, make_draft(quantity=15))

        assert material_registry.find_by_name(store, "Teak Wood").quantity == Decimal("15")

    def test_quantity_decrease_subtracts_difference(self, store, make_draft):
        """Editing purchase #1 from 100 to 80 leaves 80 after the second purchase is gone."""
        first = create_purchase(store, make_draft())
        second = create_purchase(
            store, make_draft(material_name="teak wood", quantity=50, price_per_unit=850)
        )
        delete_purchase(store, second.id)
        assert material_registry.find_by_name(store, "Teak Wood").quantity == Decimal("100")

        update_purchase(store, first.id, make_draft(quantity=80))

        assert material_registry.find_by_name(store, "Teak Wood").quantity == Decimal("80")

    def test_updates_purchase_fields_and_total(self, store, make_draft):
        """Ledger fields and the derived total follow the new draft."""
        purchase = create_purchase(store, make_draft())

        updated = update_purchase(
            store,
            purchase.id,
            make_draft(quantity=10, price_per_unit="12.50", payment_status="paid"),
        )

        assert updated.id == purchase.id
        assert updated.quantity == Decimal("10")
        assert updated.total_amount == Decimal("125.00")
        assert updated.payment_status == "Paid"

    def test_new_price_overwrites_unit_price(self, store, make_draft):
        """The edited price becomes the material's unit price."""
        purchase = create_purchase(store, make_draft())
        update_purchase(store, purchase.id, make_draft(price_per_unit=900))
        assert material_registry.find_by_name(store, "Teak Wood").unit_price == Decimal("900")

    def test_update_does_not_clamp_at_zero(self, store, make_draft):
        """Stock reduced elsewhere can go negative through an edit."""
        purchase = create_purchase(store, make_draft(quantity=10))
        material = material_registry.find_by_name(store, "Teak Wood")
        material_registry.update_material(store, material.id, {"quantity": 2})

        update_purchase(store, purchase.id, make_draft(quantity=1))

        material = material_registry.find_by_name(store, "Teak Wood")
        assert material.quantity == Decimal("-7")
        assert classify_material(material) == StockStatus.OUT_OF_STOCK

    def test_rename_targets_new_material_only(self, store, make_draft, caplog):
        """The material named by the new draft gets the difference; the old one keeps its stock."""
        purchase = create_purchase(store, make_draft(quantity=100))
        material_registry.create_material(store, name="Oak", quantity=20, unit_price=500)

        with caplog.at_level(logging.WARNING):
            update_purchase(store, purchase.id, make_draft(material_name="Oak", quantity=130))

        assert material_registry.find_by_name(store, "Teak Wood").quantity == Decimal("100")
        oak = material_registry.find_by_name(store, "Oak")
        assert oak.quantity == Decimal("50")
        assert oak.unit_price == Decimal("800")
        assert "update_purchase: material_renamed" in caplog.text

    def test_unresolved_material_is_orphaned(self, store, make_draft, caplog):
        """An edit naming an unknown material still updates the ledger."""
        purchase = create_purchase(store, make_draft())

        with caplog.at_level(logging.WARNING):
            updated = update_purchase(store, purchase.id, make_draft(material_name="Walnut"))

        assert updated.material_name == "Walnut"
        assert material_registry.find_by_name(store, "Walnut") is None
        assert "update_purchase: orphaned" in caplog.text
        assert purchase_ledger.find_orphaned_purchases(store) == [updated]

    def test_records_update_movement(self, store, make_draft):
        """Edits write an audit row carrying the signed difference."""
        purchase = create_purchase(store, make_draft(quantity=10))
        update_purchase(store, purchase.id, make_draft(quantity=4))

        movements = store.get_all(StockMovement)
        assert [m.reason for m in movements] == [
            MovementReason.PURCHASE_CREATED.value,
            MovementReason.PURCHASE_UPDATED.value,
        ]
        assert movements[-1].quantity_delta == Decimal("-6")
        assert movements[-1].quantity_after == Decimal("4")

    def test_missing_purchase_raises(self, store, make_draft):
        """Editing an unknown id raises PurchaseNotFound."""
        with pytest.raises(PurchaseNotFound):
            update_purchase(store, 9999, make_draft())

    def test_invalid_draft_changes_nothing(self, store, make_draft):
        """A rejected edit leaves both the purchase and stock unchanged."""
        purchase = create_purchase(store, make_draft())

        with pytest.raises(ValidationError):
            update_purchase(store, purchase.id, make_draft(quantity="lots"))

        assert purchase_ledger.get_purchase(store, purchase.id).quantity == Decimal("100")
        assert material_registry.find_by_name(store, "Teak Wood").quantity == Decimal("100")

    def test_registry_failure_rolls_back_ledger_edit(self, store, make_draft, monkeypatch):
        """When the stock write fails the purchase edit is undone too."""
        purchase = create_purchase(store, make_draft())
        original_update = store.update_item
        monkeypatch.setattr(store, "update_item", _fail_for(RawMaterial, original_update))

        with pytest.raises(StorageError):
            update_purchase(store, purchase.id, make_draft(quantity=150))

        monkeypatch.setattr(store, "update_item", original_update)
        assert purchase_ledger.get_purchase(store, purchase.id).quantity == Decimal("100")
        assert material_registry.find_by_name(store, "Teak Wood").quantity == Decimal("100")


class TestDeletePurchase:
    """Tests for delete_purchase()."""

    def test_delete_subtracts_purchase_quantity(self, store, make_draft):
        """Deleting the second purchase brings 150 back to 100."""
        create_purchase(store, make_draft())
        second = create_purchase(
            store, make_draft(material_name="teak wood", quantity=50, price_per_unit=850)
        )

        delete_purchase(store, second.id)

        assert material_registry.find_by_name(store, "Teak Wood").quantity == Decimal("100")
        assert len(store.get_all(Purchase)) == 1

    def test_delete_clamps_at_zero(self, store, make_draft):
        """Removing more than is on hand floors stock at zero without raising."""
        purchase = create_purchase(store, make_draft(quantity=10))
        material = material_registry.find_by_name(store, "Teak Wood")
        material_registry.update_material(store, material.id, {"quantity": 3})

        delete_purchase(store, purchase.id)

        assert material_registry.find_by_name(store, "Teak Wood").quantity == Decimal("0")

    def test_delete_keeps_unit_price(self, store, make_draft):
        """Deletion changes quantity only."""
        purchase = create_purchase(store, make_draft())
        delete_purchase(store, purchase.id)
        assert material_registry.find_by_name(store, "Teak Wood").unit_price == Decimal("800")

    def test_delete_with_missing_material_still_deletes(self, store, make_draft, caplog):
        """A purchase whose material was removed is deleted and logged as orphaned."""
        purchase = create_purchase(store, make_draft())
        material = material_registry.find_by_name(store, "Teak Wood")
        material_registry.delete_material(store, material.id)

        with caplog.at_level(logging.WARNING):
            delete_purchase(store, purchase.id)

        assert store.get_all(Purchase) == []
        assert "delete_purchase: orphaned" in caplog.text

    def test_records_delete_movement(self, store, make_draft):
        """Deletes write an audit row with the negative quantity."""
        purchase = create_purchase(store, make_draft(quantity=10))
        delete_purchase(store, purchase.id)

        movement = store.get_all(StockMovement)[-1]
        assert movement.reason == MovementReason.PURCHASE_DELETED.value
        assert movement.quantity_delta == Decimal("-10")
        assert movement.quantity_after == Decimal("0")
        assert movement.purchase_id == purchase.id

    def test_missing_purchase_raises(self, store):
        """Deleting an unknown id raises PurchaseNotFound."""
        with pytest.raises(PurchaseNotFound):
            delete_purchase(store, 9999)

    def test_registry_failure_keeps_purchase(self, store, make_draft, monkeypatch):
        """When the stock write fails the purchase is not deleted."""
        purchase = create_purchase(store, make_draft())
        monkeypatch.setattr(store, "update_item", _fail_for(RawMaterial, store.update_item))

        with pytest.raises(StorageError):
            delete_purchase(store, purchase.id)

        assert len(store.get_all(Purchase)) == 1
        assert material_registry.find_by_name(store, "Teak Wood").quantity == Decimal("100")
