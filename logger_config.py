import logging
import os
import sys
import time
from functools import wraps

SLOW_STAGE_SECONDS = 2.0
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
PROJECT_LOGGERS = ('normalize', 'estimate', 'correlate', 'insights', 'report', 'pipeline', 'cli')


def setup_logger(name: str = "pointwise") -> logging.Logger:
    """Set up logging for the command line tool.

    Handlers are attached to the `name` logger and to each project package logger,
    so module loggers created with `logging.getLogger(__name__)` share them.
    Output goes to stderr; stdout is reserved for reports.
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, log_level, logging.INFO)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    handlers = [logging.StreamHandler(sys.stderr)]

    log_file = os.getenv("LOG_FILE")
    file_error = None
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file))
        except OSError as e:
            file_error = e

    for handler in handlers:
        handler.setFormatter(formatter)

    for logger_name in (name,) + PROJECT_LOGGERS:
        target = logging.getLogger(logger_name)
        target.setLevel(level)
        target.propagate = False
        if not target.handlers:
            for handler in handlers:
                target.addHandler(handler)

    if file_error is not None:
        logger.warning("Could not create file handler for %s: %s", log_file, file_error)
    elif log_file:
        logger.info("File logging enabled: %s", log_file)
    logger.debug("Logger initialized - Level: %s", log_level)
    return logger


def _safe_value(key: str, value):
    if 'token' in key.lower() or 'password' in key.lower():
        return "***REDACTED***"
    if isinstance(value, str) and len(value) > 50:
        return f"{value[:47]}..."
    return value


def log_function_call(logger: logging.Logger, log_args: bool = False):
    """Decorator timing a call; warns when it runs longer than SLOW_STAGE_SECONDS."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            func_name = f"{func.__module__}.{func.__qualname__}"
            if log_args and kwargs:
                safe_kwargs = {k: _safe_value(k, v) for k, v in kwargs.items()}
                logger.debug("Calling %s with kwargs=%s", func_name, safe_kwargs)
            else:
                logger.debug("Calling %s", func_name)

            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error("%s failed after %.3fs - Error: %s", func_name, time.time() - start_time, e)
                raise

            execution_time = time.time() - start_time
            logger.debug("%s completed in %.3fs", func_name, execution_time)
            if execution_time > SLOW_STAGE_SECONDS:
                logger.warning("SLOW OPERATION: %s took %.3fs", func_name, execution_time)
            return result
        return wrapper
    return decorator
