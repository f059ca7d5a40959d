"""
Log sink exception classes.
"""


class SinkError(Exception):
    """Base class for all log sink errors.
    """


class ConfigError(SinkError, ValueError):
    """Missing or invalid construction-time configuration.
    """


class ConnectionFailure(SinkError):
    """Error establishing the pooled database connection.
    """


class SerializationError(SinkError):
    """Error mapping a log record to row values or building its statement.
    """


class WriteExecutionError(SinkError):
    """Insert statement failed at the database.
    """


class ReadExecutionError(SinkError):
    """Select statement failed at the database.
    """
