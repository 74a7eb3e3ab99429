"""Custom column types shared by the models."""

import enum
from typing import List, Type

from sqlalchemy import Enum as SAEnum
from sqlalchemy import Numeric

# Money is stored with two decimal places in major units.
MoneyType = Numeric(12, 2, asdecimal=True)


def _enum_values(enum_cls: Type[enum.Enum]) -> List[str]:
    return [member.value for member in enum_cls]


def enum_column_type(enum_cls: Type[enum.Enum], name: str) -> SAEnum:
    """String-backed enum column persisting member values."""
    return SAEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=32,
        values_callable=_enum_values,
        validate_strings=True,
    )
