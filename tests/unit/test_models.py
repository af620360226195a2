from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from inventory_sync.models.inventory_record import InventoryRecord
from inventory_sync.models.sync_outcome import SyncOutcome


class TestSyncOutcome:
    def test_success_has_no_error_message(self):
        outcome = SyncOutcome.success(2)

        assert outcome.successful is True
        assert outcome.items_processed == 2
        assert outcome.error_message is None

    def test_failure_always_reports_zero_items(self):
        outcome = SyncOutcome.failure("boom")

        assert outcome.successful is False
        assert outcome.items_processed == 0
        assert outcome.error_message == "boom"

    def test_success_with_message_is_rejected(self):
        with pytest.raises(ValidationError):
            SyncOutcome(successful=True, error_message="should not be here", items_processed=1)

    @pytest.mark.parametrize("message", [None, ""])
    def test_failure_without_message_is_rejected(self, message):
        with pytest.raises(ValidationError):
            SyncOutcome(successful=False, error_message=message)

    def test_negative_item_count_is_rejected(self):
        with pytest.raises(ValidationError):
            SyncOutcome.success(-1)

    def test_outcome_is_immutable(self):
        outcome = SyncOutcome.success(1)

        with pytest.raises(ValidationError):
            outcome.items_processed = 5

    def test_wire_shape_uses_camel_case(self):
        assert SyncOutcome.success(3).model_dump(by_alias=True) == {
            "isSuccessful": True,
            "errorMessage": None,
            "itemsProcessed": 3,
        }


class TestInventoryRecord:
    def test_empty_sku_is_rejected(self):
        with pytest.raises(ValidationError):
            InventoryRecord(sku="", quantity_on_hand=1, last_modified=datetime.now(timezone.utc))

    def test_record_is_immutable(self, sample_records):
        with pytest.raises(ValidationError):
            sample_records[0].quantity_on_hand = 99

    def test_unknown_fields_are_rejected(self):
        with pytest.raises(ValidationError):
            InventoryRecord(
                sku="SKU001",
                quantity_on_hand=1,
                last_modified=datetime.now(timezone.utc),
                warehouse="north",
            )
