"""
Tipi e classe base condivisi dagli schemi Pydantic
Progetto: Invoice App (Gestionale Fatture)
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

# Importi monetari: Decimal internamente, numero nel JSON di risposta
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

CENT = Decimal("0.01")

# Limiti delle colonne Numeric(10, 2) e Integer
MAX_AMOUNT = Decimal("99999999.99")
MAX_INT = 2**31 - 1


def to_fixed(value: Decimal) -> Decimal:
    """Arrotonda un importo a due decimali (formato di salvataggio)."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


class CamelModel(BaseModel):
    """
    Base per gli schemi esposti dall'API.

    I campi sono serializzati in camelCase (paymentDue, postCode, ...)
    e accettati in input sia in camelCase sia in snake_case.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
