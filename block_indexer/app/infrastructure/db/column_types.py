from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import Numeric, String
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator, TypeEngine


class DecimalInteger(TypeDecorator[int]):
    """
    Arbitrary-precision integer column (token amounts, block heights).

    Stored as NUMERIC(65, 0) where the backend has an exact wide numeric type.
    SQLite only has 64-bit integers and floats, so there the value is kept as
    base 10 text to avoid overflow and rounding. Python side is always int.
    """

    impl = Numeric(65, 0)
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect) -> TypeEngine[Any]:
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(80))
        return dialect.type_descriptor(Numeric(65, 0))

    def process_bind_param(self, value: Any, dialect: Dialect) -> Any:
        if value is None:
            return None
        if dialect.name == "sqlite":
            return str(int(value))
        return Decimal(int(value))

    def process_result_value(self, value: Any, dialect: Dialect) -> int | None:
        if value is None:
            return None
        return int(value)
