"""
Utilities for SQL statement generation across different database backends.
"""
import logging
from collections.abc import Mapping
from typing import Any

from logsink.options import FieldMapping
from logsink.query import QueryOptions
from logsink.sql import Statement, bind_value
from logsink.strategy import get_strategy

logger = logging.getLogger(__name__)

__all__ = ['build_insert', 'build_select', 'select_columns']


def build_insert(table: str, row: Mapping[str, Any], dialect: str = 'mssql') -> Statement:
    """Generate an INSERT statement with one bind parameter per column.

    Args:
        table: Table name
        row: Column name to value mapping, in column order
        dialect: Database dialect

    Returns
        Statement with `:v0, :v1, ...` placeholders
    """
    strategy = get_strategy(dialect)
    quoted_table = strategy.quote_identifier(table)

    columns, placeholders, params = [], [], {}
    for i, (column, value) in enumerate(row.items()):
        name = f'v{i}'
        columns.append(strategy.quote_identifier(column))
        placeholders.append(f':{name}')
        params[name] = strategy.convert_bind_value(bind_value(value))

    sql = (f'INSERT INTO {quoted_table} ({", ".join(columns)}) '
           f'VALUES ({", ".join(placeholders)});')
    return Statement(sql, params)


def select_columns(requested: list[str], fields: FieldMapping) -> list[str]:
    """Resolve the projection: requested columns plus level and timestamp.

    Role names are translated through the field mapping. Duplicates are
    dropped, first occurrence wins.
    """
    columns = []
    for name in [*requested, 'level', 'timestamp']:
        column = fields.resolve(name)
        if column not in columns:
            columns.append(column)
    return columns


def build_select(table: str, options: QueryOptions | Mapping[str, Any] | None,
                 fields: FieldMapping | None = None, dialect: str = 'mssql') -> Statement:
    """Generate a SELECT statement for reading log records back.

    Args:
        table: Table name
        options: Query options (time range, limit, order, fields)
        fields: Field mapping for column names
        dialect: Database dialect

    Returns
        Statement with `:from_ts` / `:until_ts` placeholders for the time range
    """
    strategy = get_strategy(dialect)
    options = QueryOptions.from_mapping(options)
    fields = fields or FieldMapping()

    quoted_table = strategy.quote_identifier(table)
    quoted_cols = ', '.join(strategy.quote_identifier(col)
                            for col in select_columns(options.fields, fields))
    timestamp = strategy.quote_identifier(fields.timestamp)
    prefix, suffix = strategy.limit_clause(options.limit)

    sql = f'SELECT {prefix}{quoted_cols} FROM {quoted_table}'

    where, params = [], {}
    if options.from_ is not None:
        where.append(f'{timestamp} >= :from_ts')
        params['from_ts'] = strategy.convert_bind_value(options.from_)
    if options.until is not None:
        where.append(f'{timestamp} <= :until_ts')
        params['until_ts'] = strategy.convert_bind_value(options.until)
    if where:
        sql += f' WHERE {" AND ".join(where)}'

    sql += f' ORDER BY {timestamp} {options.order}{suffix}'

    return Statement(sql, params)
