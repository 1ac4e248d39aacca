import logging
import sys
import time
import functools
from typing import Callable, Optional, TextIO


class DefaultLogFieldsFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "service"):
            record.service = "system"

        if not hasattr(record, "func_name"):
            record.func_name = record.name

        return True

# -------------------------------------------------------------------
#   LOGGER SETUP
# -------------------------------------------------------------------

logger = logging.getLogger("kdfkeys")
logger.addHandler(logging.NullHandler())

FORMAT = "%(asctime)s | %(levelname)s | %(service)s | %(func_name)s → %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"


def enable_console_logging(stream: Optional[TextIO] = None, level: int = logging.DEBUG) -> logging.Handler:
    """
    Attach a stream handler to the kdfkeys logger.

    Nothing is printed unless this is called; the command line front end
    calls it for --verbose. Returns the handler so callers can remove it.
    """
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(FORMAT, datefmt=DATEFMT))
    handler.addFilter(DefaultLogFieldsFilter())
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler


def disable_console_logging(handler: logging.Handler) -> None:
    logger.removeHandler(handler)
    handler.close()
    logger.setLevel(logging.NOTSET)


# -------------------------------------------------------------------
#   INTERNAL LOG WRAPPER FUNCTION (USED BY ALL HELPERS)
# -------------------------------------------------------------------

def _log(level: str, message: str, func_name: str, service="core"):
    logger.log(
        getattr(logging, level),
        message,
        extra={
            "func_name": func_name,
            "service": service,
        }
    )


# -------------------------------------------------------------------
#   PUBLIC LOG FUNCTIONS
# -------------------------------------------------------------------

def log_debug(message: str, func_name: str, service="debug"):
    _log("DEBUG", message, func_name, service)


def log_exception(exc: Exception, func_name: str, service="exception"):
    _log("ERROR", f"{type(exc).__name__}: {exc}", func_name, service)


# -------------------------------------------------------------------
#   DECORATOR
# -------------------------------------------------------------------

def log_service(fn: Callable = None, *, service: str = "core"):
    """
    Log start, completion time and failure of the wrapped call.

    Arguments and return values are never logged, since they may hold
    passphrase or key material.

    Usage:
      @log_service
      def helper(...): ...
      OR
      @log_service(service="kdf")
      def derive(...): ...
    """

    def decorator(inner_fn):
        @functools.wraps(inner_fn)
        def _wrapper(*args, **kwargs):
            fn_name = inner_fn.__name__
            _log("DEBUG", "started", fn_name, service=service)
            start = time.perf_counter()

            try:
                result = inner_fn(*args, **kwargs)
            except Exception as exc:
                elapsed = (time.perf_counter() - start) * 1000
                _log("ERROR", f"failed after {elapsed:.2f}ms | {type(exc).__name__}", fn_name, service=service)
                raise

            elapsed = (time.perf_counter() - start) * 1000
            _log("DEBUG", f"completed | {elapsed:.2f}ms", fn_name, service=service)
            return result

        return _wrapper

    # Support both @log_service and @log_service(...options...)
    if callable(fn):
        return decorator(fn)
    return decorator
