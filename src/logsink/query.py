"""
Query options for reading persisted log records.
"""
import datetime
from collections.abc import Mapping
from dataclasses import dataclass, field
from numbers import Number
from typing import Any

import dateutil.parser

__all__ = ['QueryOptions', 'parse_bound', 'parse_limit', 'normalize_order']

DEFAULT_QUERY_FIELDS = ('message', 'meta')


def parse_bound(value: Any) -> datetime.datetime | None:
    """Parse a time range bound; invalid or missing bounds give None.

    >>> parse_bound('2024-01-31')
    datetime.datetime(2024, 1, 31, 0, 0)
    >>> parse_bound('not a date') is None
    True
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    if not isinstance(value, str):
        return None
    try:
        return dateutil.parser.parse(value)
    except (ValueError, OverflowError):
        return None


def parse_limit(value: Any) -> int | None:
    """Return the row limit when `value` is a valid non-negative number.

    Numeric strings are accepted; anything else gives None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, Number):
        return None
    try:
        limit = int(value)
    except (ValueError, OverflowError, TypeError):
        return None
    if limit < 0:
        return None
    return limit


def normalize_order(value: Any) -> str:
    """ASC or DESC (case-insensitive); anything else is DESC."""
    if isinstance(value, str) and value.upper() in {'ASC', 'DESC'}:
        return value.upper()
    return 'DESC'


@dataclass
class QueryOptions:
    """Validated read options.

    `from_` holds the `from` bound (a Python keyword).
    """
    from_: datetime.datetime | None = None
    until: datetime.datetime | None = None
    limit: int | None = None
    order: str = 'DESC'
    fields: list[str] = field(default_factory=lambda: list(DEFAULT_QUERY_FIELDS))

    def __post_init__(self):
        self.from_ = parse_bound(self.from_)
        self.until = parse_bound(self.until)
        self.limit = parse_limit(self.limit)
        self.order = normalize_order(self.order)
        if not self.fields:
            self.fields = list(DEFAULT_QUERY_FIELDS)
        elif isinstance(self.fields, str):
            self.fields = [self.fields]
        else:
            self.fields = list(self.fields)

    @classmethod
    def from_mapping(cls, options: 'Mapping[str, Any] | QueryOptions | None') -> 'QueryOptions':
        """Build options from a mapping using the `from` key."""
        if options is None:
            return cls()
        if isinstance(options, QueryOptions):
            return options
        return cls(
            from_=options.get('from', options.get('from_')),
            until=options.get('until'),
            limit=options.get('limit'),
            order=options.get('order'),
            fields=options.get('fields'),
            )
