"""Base schema shared by all input and result records."""
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from finanzplan.money.arithmetic import to_decimal


def _coerce_money(value: Any) -> Decimal:
    # JSON floats go through their string form, never through binary arithmetic
    return to_decimal(value)


# Exact EUR amount or percentage on input records
Money = Annotated[Decimal, BeforeValidator(_coerce_money)]


class FinanzModel(BaseModel):
    """
    Base for all financial plan records.

    Attributes are snake_case in Python and camelCase on the wire
    (eigenkapital_quote <-> eigenkapitalQuote). Both spellings are accepted
    on input so records assembled by the coaching layer validate as-is.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_dict(self) -> dict:
        """Serialize for API responses (camelCase, Decimals as strings)."""
        return self.model_dump(mode="json", by_alias=True)
