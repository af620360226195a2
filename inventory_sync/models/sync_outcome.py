from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SyncOutcome(BaseModel):
    """
    Result of one full synchronization run.

    A successful run never carries an error message and a failed run always
    does. Serialized with camelCase names for the trigger endpoint.
    """

    successful: bool = Field(..., alias="isSuccessful")
    error_message: Optional[str] = Field(default=None, alias="errorMessage")
    items_processed: int = Field(default=0, ge=0, alias="itemsProcessed")

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    @model_validator(mode="after")
    def check_message_matches_status(self):
        if self.successful and self.error_message is not None:
            raise ValueError("A successful outcome cannot carry an error message")
        if not self.successful and not self.error_message:
            raise ValueError("A failed outcome must carry an error message")
        return self

    @classmethod
    def success(cls, items_processed: int) -> "SyncOutcome":
        return cls(successful=True, items_processed=items_processed)

    @classmethod
    def failure(cls, error_message: str) -> "SyncOutcome":
        return cls(successful=False, error_message=error_message, items_processed=0)
