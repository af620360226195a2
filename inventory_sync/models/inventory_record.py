from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class InventoryRecord(BaseModel):
    """
    One product's stock level as reported by the source system.
    """

    sku: str = Field(..., min_length=1)  # Natural key, matched against the remote alternate key
    quantity_on_hand: int
    last_modified: datetime  # When the source system last changed the record

    model_config = ConfigDict(extra="forbid", frozen=True)
