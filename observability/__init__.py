"""
Observability package for Stencil.

Provides structured JSON logging with render correlation IDs.
"""

from .logging import (
    StructuredLogger,
    render_logger,
    set_render_context,
    clear_render_context,
    source_context,
    generate_render_id,
    configure_logging,
)

__all__ = [
    "StructuredLogger",
    "render_logger",
    "set_render_context",
    "clear_render_context",
    "source_context",
    "generate_render_id",
    "configure_logging",
]
