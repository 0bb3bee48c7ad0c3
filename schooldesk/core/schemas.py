"""Shared pydantic building blocks: camelCase wire models and bounded value types."""
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from schooldesk.core.config import settings


class ApiModel(BaseModel):
    """Base for request and response bodies: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(ApiModel):
    message: str


# Non-negative and bounded by MAX_AMOUNT
Money = Annotated[Decimal, Field(ge=0, le=settings.max_amount, max_digits=12, decimal_places=2)]

# YYYY-MM (salary month)
Month = Annotated[str, Field(pattern=r"^\d{4}-(0[1-9]|1[0-2])$")]

# Money on the way out: plain JSON numbers rather than decimal strings
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
