"""
SQL value classification and statement containers.

Every column value written by the sink falls into one of four classes:

    NULL        -> literal `null`, bound as None
    NUMBER      -> bare decimal literal, bound unchanged
    STRING      -> single-quoted literal with embedded quotes doubled
    STRUCTURED  -> JSON text, then quoted like a string

Statements are executed with bound parameters. The literal form is kept for
display (`Statement.render()`) and follows the same classification.

Main entry points:
- `quote_identifier()` - Quote table/column names for a dialect
- `classify_value()` - Row value class of a Python value
- `format_literal()` - Literal SQL text for a value
- `bind_value()` - Driver-ready bind value
- `Statement` - SQL text plus named bind parameters
"""
import datetime
import json
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from numbers import Number
from typing import Any

__all__ = [
    'RowValueKind',
    'Statement',
    'bind_value',
    'classify_value',
    'escape_string_literal',
    'format_literal',
    'quote_identifier',
]

# Named bind parameter, e.g. :v0 or :from_ts
_BIND_PARAM = re.compile(r'(?<![:\w]):([A-Za-z_]\w*)')


class RowValueKind(Enum):
    """Literal class of a single column value."""
    NULL = auto()
    NUMBER = auto()
    STRING = auto()
    STRUCTURED = auto()
    OTHER = auto()


def quote_identifier(identifier: str, dialect: str = 'mssql') -> str:
    """Safely quote database identifiers.

    Parameters
        identifier: Table or column name
        dialect: Database dialect

    Returns
        Quoted identifier

    Raises
        ValueError: If dialect is unsupported
    """
    if dialect == 'mssql':
        return '[' + identifier.replace(']', ']]') + ']'

    if dialect in {'postgresql', 'sqlite'}:
        return '"' + identifier.replace('"', '""') + '"'

    raise ValueError(f'Unknown dialect: {dialect}')


def classify_value(value: Any) -> RowValueKind:
    """Return the row value class of `value`.

    >>> classify_value(None)
    <RowValueKind.NULL: 1>
    >>> classify_value(3.5)
    <RowValueKind.NUMBER: 2>
    >>> classify_value({'a': 1})
    <RowValueKind.STRUCTURED: 4>
    """
    if value is None:
        return RowValueKind.NULL
    if isinstance(value, Number):
        return RowValueKind.NUMBER
    if isinstance(value, str):
        return RowValueKind.STRING
    if isinstance(value, (dict, list, tuple)):
        return RowValueKind.STRUCTURED
    return RowValueKind.OTHER


def escape_string_literal(s: str) -> str:
    """Escape a string for use inside a single-quoted SQL literal."""
    return s.replace("'", "''")


def _format_number(value: Number) -> str:
    if isinstance(value, bool):
        return str(int(value))
    return str(value)


def format_literal(value: Any) -> str:
    """Render a value as literal SQL text.

    >>> format_literal("it's")
    "'it''s'"
    >>> format_literal(None)
    'null'
    >>> format_literal(42)
    '42'
    """
    kind = classify_value(value)
    if kind is RowValueKind.NULL:
        return 'null'
    if kind is RowValueKind.NUMBER:
        return _format_number(value)
    if kind is RowValueKind.STRUCTURED:
        return f"'{escape_string_literal(json.dumps(value))}'"
    if isinstance(value, datetime.datetime):
        value = value.isoformat(sep=' ')
    return f"'{escape_string_literal(str(value))}'"


def bind_value(value: Any) -> Any:
    """Convert a value to the form handed to the driver as a bind parameter.

    Structured values are bound as their JSON text. Dates and times are left
    for the dialect strategy to convert.
    """
    kind = classify_value(value)
    if kind is RowValueKind.STRUCTURED:
        return json.dumps(value)
    if kind is RowValueKind.OTHER and not isinstance(value, datetime.date):
        return str(value)
    return value


@dataclass
class Statement:
    """SQL text with named bind parameters (`:name` style)."""
    sql: str
    params: dict[str, Any] = field(default_factory=dict)

    def render(self) -> str:
        """Return the statement with every bind parameter inlined as a literal.
        """
        def replace(match):
            name = match.group(1)
            if name not in self.params:
                return match.group(0)
            return format_literal(self.params[name])

        return _BIND_PARAM.sub(replace, self.sql)

    def __str__(self) -> str:
        return self.sql
