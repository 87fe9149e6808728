from decimal import Decimal
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from stockapp.services.stock_ledger import MAX_QUANTITY, is_whole_cents

# Monetary amount: exact Decimal in Python, plain JSON number on the wire.
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]

MIN_PRICE = Decimal("0.01")

# Upper bound for every integer input stored in an Integer column
MAX_INT = MAX_QUANTITY


def _check_whole_cents(value: Decimal) -> Decimal:
    if not is_whole_cents(value):
        raise ValueError("must be a whole number of cents")
    return value


# Money supplied by a client: at least MIN_PRICE, at most two decimal places.
Price = Annotated[Money, Field(ge=MIN_PRICE), AfterValidator(_check_whole_cents)]


class CamelModel(BaseModel):
    """Base schema that speaks camelCase JSON and accepts snake_case too."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """Body of every error response."""
    message: str
