"""
Services Module - infrastructure shared by the form calculators.

- Logging configuration and the calculation audit logger
"""

from .logging_config import (
    CalculationLogger,
    ContextLogger,
    JsonFormatter,
    ReadableFormatter,
    configure_logging,
    get_logger,
    log_performance,
)

__all__ = [
    'CalculationLogger',
    'ContextLogger',
    'JsonFormatter',
    'ReadableFormatter',
    'configure_logging',
    'get_logger',
    'log_performance',
]
