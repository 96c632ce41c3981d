import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, field_validator

CURRENCY = "INR"


class CreateLinkRequest(BaseModel):
    amount_in_inr: StrictInt | StrictFloat

    @field_validator("amount_in_inr")
    @classmethod
    def amount_must_be_positive_and_finite(cls, v: int | float) -> int | float:
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError("amount_in_inr must be finite")
        if v <= 0:
            raise ValueError("amount_in_inr must be positive")
        return v


class LinkPayload(BaseModel):
    """Request body for the provider's payment-link endpoint."""

    amount: int = Field(..., gt=0)  # paise
    currency: Literal["INR"] = CURRENCY
    accept_partial: bool = False
    description: StrictStr


class ProviderLinkResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    short_url: StrictStr | None = None
    link_url: StrictStr | None = None

    def resolved_url(self) -> str | None:
        return self.short_url or self.link_url


class CreateLinkResponse(BaseModel):
    link_url: StrictStr
