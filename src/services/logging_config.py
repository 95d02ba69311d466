"""
Logging configuration for the tax-form pipeline.

Provides structured logging with:
- JSON formatting for log aggregation
- Human-readable formatting for development
- Calculation-specific logging for a year-over-year audit trail
- Timing of each projected year
"""

import logging
import json
import sys
import time
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from config.settings import PipelineSettings, get_settings

# Correlates every log line emitted while one projection runs
projection_id_var: ContextVar[Optional[str]] = ContextVar('projection_id', default=None)


class JsonFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Outputs one JSON object per record.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        projection_id = projection_id_var.get()
        if projection_id:
            log_data["projection_id"] = projection_id

        if hasattr(record, 'extra_data'):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ReadableFormatter(logging.Formatter):
    """Human-readable log formatter for development."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m',
    }

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if self.use_color:
            color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
            reset = self.COLORS['RESET']
        else:
            color = reset = ''

        timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]
        level = f"{color}{record.levelname:8s}{reset}"

        message = f"{timestamp} {level} [{record.name}] {record.getMessage()}"

        if hasattr(record, 'extra_data') and record.extra_data:
            extras = ' | '.join(f"{k}={v}" for k, v in record.extra_data.items())
            message += f" | {extras}"

        return message


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that attaches its context to every record's extra_data."""

    def process(self, msg: str, kwargs: Dict) -> tuple:
        extra = kwargs.get('extra', {})

        if 'extra_data' not in extra:
            extra['extra_data'] = {}
        for key, value in self.extra.items():
            extra['extra_data'].setdefault(key, value)

        projection_id = projection_id_var.get()
        if projection_id:
            extra['extra_data'].setdefault('projection_id', projection_id)

        kwargs['extra'] = extra
        return msg, kwargs


def configure_logging(
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
    log_file: Optional[Path] = None,
    settings: Optional[PipelineSettings] = None,
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL); defaults to
            settings.log_level
        json_output: If True, output JSON formatted logs; defaults to
            settings.log_json
        log_file: Optional file path for log output (always JSON)
        settings: Settings to read defaults from; get_settings() when omitted
    """
    settings = settings or get_settings()
    level = (level or settings.log_level).upper()
    if json_output is None:
        json_output = settings.log_json

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if json_output:
        formatter = JsonFormatter()
    else:
        formatter = ReadableFormatter(use_color=sys.stdout.isatty())

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JsonFormatter())
        root_logger.addHandler(file_handler)


def get_logger(name: str, **extra) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (typically __name__)
        **extra: Additional context to include in all logs
    """
    return ContextLogger(logging.getLogger(name), extra)


class CalculationLogger:
    """
    Audit-trail logger for a multi-year loss projection.

    Records the projection inputs, each form computed for each year with its
    timing, and the carryforward handed to the following year.
    """

    def __init__(self, projection_id: Optional[str] = None):
        self.projection_id = projection_id
        self.logger = get_logger("calculation", projection_id=projection_id)
        self._start_time: Optional[float] = None
        self._step_times: Dict[str, int] = {}

    def start_projection(self, first_year: int, last_year: int, is_single: bool) -> None:
        self._start_time = time.time()
        self._step_times = {}
        self.logger.info(
            "Starting loss carryforward projection",
            extra={'extra_data': {
                'first_year': first_year,
                'last_year': last_year,
                'is_single': is_single,
            }}
        )

    def log_step(self, step_name: str, **data) -> float:
        """Log the start of a step and return its start time."""
        step_start = time.time()
        self.logger.debug(
            f"Calculation step: {step_name}",
            extra={'extra_data': {'step': step_name, **data}}
        )
        return step_start

    def complete_step(self, step_name: str, step_start: float, **result) -> None:
        duration_ms = int((time.time() - step_start) * 1000)
        self._step_times[step_name] = duration_ms
        self.logger.debug(
            f"Completed step: {step_name}",
            extra={'extra_data': {'step': step_name, 'duration_ms': duration_ms, **result}}
        )

    def log_excess_business_loss(
        self,
        tax_year: int,
        threshold: float,
        business_loss: float,
        disallowed: float,
    ) -> None:
        """Log a Form 461 limitation that disallowed part of a business loss."""
        self.logger.info(
            "Excess business loss disallowed",
            extra={'extra_data': {
                'tax_year': tax_year,
                'threshold': threshold,
                'business_loss': business_loss,
                'disallowed': disallowed,
            }}
        )

    def log_nol_usage(
        self,
        tax_year: int,
        starting_nol: float,
        agi_before_nol: float,
        income_limit: float,
        nol_used: float,
    ) -> None:
        self.logger.info(
            "NOL deduction applied",
            extra={'extra_data': {
                'tax_year': tax_year,
                'starting_nol': starting_nol,
                'agi_before_nol': agi_before_nol,
                'income_limit': income_limit,
                'nol_used': nol_used,
            }}
        )

    def log_year(
        self,
        tax_year: int,
        agi: float,
        taxable_income: float,
        ending_nol: float,
    ) -> None:
        self.logger.info(
            "Projected year complete",
            extra={'extra_data': {
                'tax_year': tax_year,
                'agi': agi,
                'taxable_income': taxable_income,
                'ending_nol': ending_nol,
            }}
        )

    def log_result(self, years: int, final_carryforward: float) -> None:
        """Log the end of the projection with per-step timings."""
        duration_ms = int((time.time() - self._start_time) * 1000) if self._start_time else 0
        self.logger.info(
            "Projection complete",
            extra={'extra_data': {
                'years': years,
                'final_carryforward': final_carryforward,
                'duration_ms': duration_ms,
                'step_times': self._step_times,
            }}
        )

    def log_warning(self, message: str, **data) -> None:
        self.logger.warning(message, extra={'extra_data': data})

    def log_validation_error(self, field: str, error: str, value: Any = None) -> None:
        self.logger.error(
            f"Validation failed: {field}",
            extra={'extra_data': {'field': field, 'error': error, 'value': value}}
        )


def log_performance(name: Optional[str] = None) -> Callable:
    """
    Decorator to log how long a function takes.

    Args:
        name: Optional name override for the log entry
    """
    def decorator(func: Callable) -> Callable:
        func_name = name or func.__name__

        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger("performance")
            start = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration_ms = int((time.time() - start) * 1000)
                logger.error(
                    f"{func_name} failed",
                    extra={'extra_data': {'duration_ms': duration_ms, 'error': str(e)}}
                )
                raise
            duration_ms = int((time.time() - start) * 1000)
            logger.debug(
                f"{func_name} completed",
                extra={'extra_data': {'duration_ms': duration_ms}}
            )
            return result

        return wrapper

    return decorator
