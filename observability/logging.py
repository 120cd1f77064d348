"""
Structured JSON logging for the rendering engine.

Provides correlation IDs and render events embedded in logs so that
skipped properties and host failures can be traced back to the render
call that produced them.
"""

import json
import uuid
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from contextlib import contextmanager
from contextvars import ContextVar

# Context variables for render tracing
RENDER_ID: ContextVar[str] = ContextVar('render_id', default=None)
SOURCE_NAME: ContextVar[str] = ContextVar('source_name', default=None)


class StructuredLogger:
    """Structured JSON logger with correlation IDs."""

    def __init__(self, name: str, level: int = logging.INFO):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        # Remove any existing handlers to avoid duplicates
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        handler = logging.StreamHandler()
        handler.setFormatter(self.JSONFormatter())
        self.logger.addHandler(handler)

        self.logger.propagate = False

    class JSONFormatter(logging.Formatter):
        """JSON formatter with correlation IDs and structured fields."""

        def format(self, record):
            """Format log record as structured JSON."""
            log_entry = {
                'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
                'level': record.levelname,
                'logger': record.name,
                'message': record.getMessage(),
                'module': record.module,
                'function': record.funcName,
                'line': record.lineno,
                'thread': record.thread,
            }

            if RENDER_ID.get():
                log_entry['render_id'] = RENDER_ID.get()
            if SOURCE_NAME.get():
                log_entry['source_name'] = SOURCE_NAME.get()

            if hasattr(record, 'extra_fields'):
                log_entry.update(record.extra_fields)

            if record.exc_info:
                log_entry['exception'] = self.formatException(record.exc_info)
                log_entry['exception_type'] = record.exc_info[0].__name__ if record.exc_info[0] else None

            return json.dumps(log_entry, default=str)

    def _log_with_extras(self, level: int, message: str, **extra_fields):
        """Log message with extra structured fields."""
        self.logger.log(level, message, extra={'extra_fields': extra_fields})

    def debug(self, message: str, **extra_fields):
        self._log_with_extras(logging.DEBUG, message, **extra_fields)

    def info(self, message: str, **extra_fields):
        self._log_with_extras(logging.INFO, message, **extra_fields)

    def warning(self, message: str, **extra_fields):
        self._log_with_extras(logging.WARNING, message, **extra_fields)

    def error(self, message: str, **extra_fields):
        self._log_with_extras(logging.ERROR, message, **extra_fields)

    # Render events
    def render_failed(self, template: str, error: Exception):
        """Log a template that failed to compile or evaluate."""
        self.debug(
            "Template render failed",
            template=template[:100],
            error=str(error),
            error_type=type(error).__name__,
            event_type="render_failed"
        )

    def host_failure(self, operation: str, error: BaseException):
        """Log an unrecoverable failure that is about to be re-raised."""
        self.warning(
            f"{operation}: unrecoverable failure: {error!r}",
            operation=operation,
            error_type=type(error).__name__,
            event_type="host_failure"
        )

    def property_render_skipped(self, object_type: str, property_name: str, error: Exception):
        """Log a property the reflective renderer could not update."""
        self.warning(
            f"Skipping property {object_type}.{property_name}: {error}",
            object_type=object_type,
            property_name=property_name,
            error_type=type(error).__name__,
            event_type="property_render_skipped"
        )

    def helpers_registered(self, names, environment_id: int):
        """Log helper registration on an environment."""
        self.debug(
            "Template helpers registered",
            helpers=sorted(names),
            environment_id=environment_id,
            event_type="helpers_registered"
        )


def set_render_context(render_id: str = None, source_name: str = None):
    """Set render context for logging correlation."""
    if render_id:
        RENDER_ID.set(render_id)
    if source_name:
        SOURCE_NAME.set(source_name)


def clear_render_context():
    """Clear all render context variables."""
    for ctx_var in [RENDER_ID, SOURCE_NAME]:
        ctx_var.set(None)


@contextmanager
def source_context(source_name: Optional[str]):
    """Attach ``source_name`` to records logged inside the block.

    An explicitly set source name is left in place.
    """
    if not source_name or SOURCE_NAME.get():
        yield
        return
    token = SOURCE_NAME.set(source_name)
    try:
        yield
    finally:
        SOURCE_NAME.reset(token)


def get_render_context() -> Dict[str, Optional[str]]:
    """Get current render context as dictionary."""
    return {
        'render_id': RENDER_ID.get(),
        'source_name': SOURCE_NAME.get(),
    }


def generate_render_id() -> str:
    """Generate unique render ID."""
    return f"render-{uuid.uuid4().hex[:8]}"


def configure_logging(level: str = "INFO"):
    """Apply a log level name to the rendering loggers."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    for name in ("templating", "observability"):
        logging.getLogger(name).setLevel(numeric)
    render_logger.logger.setLevel(numeric)


render_logger = StructuredLogger("templating.events")
