# appsumo_schema.py
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


REFUND_ACTION = "refund"


class AppSumoActionRequest(BaseModel):
    """Wire payload of the AppSumo licensing webhook; uuid is the subscription id."""

    plan_id: str = Field(..., min_length=1, max_length=100)
    action: str = Field(..., min_length=1, max_length=50)
    uuid: str = Field(..., min_length=1, max_length=255)
    activation_email: str = Field(..., min_length=3, max_length=255)

    @property
    def is_refund(self) -> bool:
        return self.action == REFUND_ACTION


class AppSumoPlanRead(BaseModel):
    uuid: str
    plan_id: str
    activation_email: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
