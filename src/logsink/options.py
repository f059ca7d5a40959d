from collections.abc import Callable, Mapping
from dataclasses import dataclass, fields
from typing import Any

import pandas as pd
import pyarrow as pa
from logsink.exceptions import ConfigError
from logsink.strategy import get_available_dialects, get_strategy_class
from logsink.strategy import is_supported_dialect

from libb import ConfigOptions, scriptname

__all__ = [
    'FieldMapping',
    'SinkOptions',
    'iterdict_data_loader',
    'pandas_numpy_data_loader',
    'pandas_pyarrow_data_loader',
]

REQUIRED_OPTIONS = ('server', 'user', 'password', 'database', 'table')


def iterdict_data_loader(data, columns, **kwargs) -> list[dict]:
    """Minimal data loader.

    Rows are passed through as a list of dicts in store order.
    """
    if not data:
        return []
    return list(data)


def pandas_numpy_data_loader(data, columns, **kwargs) -> pd.DataFrame:
    """Standard pandas DataFrame loader using NumPy.

    Always returns a DataFrame, with columns preserved for empty results.
    """
    if not data:
        return pd.DataFrame(columns=list(columns))
    return pd.DataFrame.from_records(list(data), columns=list(columns))


def pandas_pyarrow_data_loader(data, columns, **kwargs) -> pd.DataFrame:
    """PyArrow-based pandas DataFrame loader.

    Always returns a DataFrame, with columns preserved for empty results.
    """
    if not data:
        return pd.DataFrame(columns=list(columns))

    column_names = list(columns)
    columns_data = [[row[col] for row in data] for col in column_names]
    return pa.table(columns_data, names=column_names).to_pandas(types_mapper=pd.ArrowDtype)


@dataclass(frozen=True)
class FieldMapping:
    """Column names for the four logical log record roles.
    """
    level: str = 'level'
    meta: str = 'meta'
    message: str = 'message'
    timestamp: str = 'timestamp'

    @classmethod
    def from_value(cls, value: 'FieldMapping | Mapping[str, str] | None') -> 'FieldMapping':
        """Build a mapping from an override.

        An override replaces the defaults wholesale: every role must be named.
        """
        if value is None:
            return cls()
        if isinstance(value, FieldMapping):
            mapping = value
        elif isinstance(value, Mapping):
            unknown = set(value) - cls.roles()
            if unknown:
                raise ConfigError(f'Unknown field roles: {sorted(unknown)}')
            mapping = cls(**{role: value.get(role) for role in cls.roles()})
        else:
            raise ConfigError(f'fields must be a mapping, got {type(value).__name__}')
        mapping.validate()
        return mapping

    @classmethod
    def roles(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    def validate(self) -> None:
        for role in self.roles():
            column = getattr(self, role)
            if not column or not isinstance(column, str):
                raise ConfigError(f'The column name for field {role} is required')

    def resolve(self, name: str) -> str:
        """Translate a logical role to its column; other names pass through."""
        if name in self.roles():
            return getattr(self, name)
        return name


@dataclass
class SinkOptions(ConfigOptions):
    """Options

    supported driver names: `mssql`, `postgresql`, `sqlite`

    Required: server, user, password, database, table.

    Connection pooling options:
    - pool_max_connections: Maximum connections in pool (default: 10)
    - pool_min_connections: Connections opened when the pool starts (default: 0)
    - pool_idle_timeout: Maximum connection age in seconds before it is replaced
      on checkout (SQLAlchemy pool_recycle, age based rather than idle
      reaping) (default: 30)

    Write options:
    - fire_and_forget: Report success to write callbacks even when the
      insert fails (default: True)
    """
    drivername: str = 'mssql'
    server: str = None
    user: str = None
    password: str = None
    database: str = None
    table: str = None
    port: int = 0
    timeout: int = 0
    appname: str = None
    fields: FieldMapping | dict | None = None
    encrypt: bool = False
    trust_server_certificate: bool = False
    odbc_driver: str = 'ODBC Driver 18 for SQL Server'
    console: bool = False
    fire_and_forget: bool = True
    data_loader: Callable[..., Any] | None = None
    # Connection pooling parameters
    pool_max_connections: int = 10
    pool_min_connections: int = 0
    pool_idle_timeout: int = 30

    def __post_init__(self):
        if not is_supported_dialect(self.drivername):
            available = get_available_dialects()
            raise ConfigError(f'drivername must be one of: {available}')
        for name in REQUIRED_OPTIONS:
            if not getattr(self, name):
                raise ConfigError(f'The database {name} is required')
        self.fields = FieldMapping.from_value(self.fields)
        if self.pool_max_connections < 1:
            raise ConfigError('pool_max_connections must be at least 1')
        if not 0 <= self.pool_min_connections <= self.pool_max_connections:
            raise ConfigError('pool_min_connections must be between 0 and pool_max_connections')
        self.appname = self.appname or scriptname() or 'python_console'
        strategy_cls = get_strategy_class(self.drivername)
        strategy_cls.validate_options(self)
        if self.data_loader is None:
            self.data_loader = iterdict_data_loader
