"""
Template helpers and environment setup.

Helpers are registered on a Jinja2 environment both as globals and as
filters, so either form works inside a template:

    {{ dollarsWithSign(order.total) }}
    {{ order.total | dollarsWithSign }}
    {{ date_long("now0m30d") }}

Registration mutates the environment and must happen once, before the
environment is shared between threads.
"""

import logging
from typing import Any, Callable, Dict, Optional

from jinja2 import Environment, StrictUndefined, Undefined
from markupsafe import Markup

from observability.logging import configure_logging, render_logger
from .config import RenderConfig
from .currency import (
    format_dollars_and_cents_no_sign,
    format_dollars_and_cents_with_sign,
    format_dollars_no_sign,
    format_dollars_with_sign,
)
from .periods import NOW_TOKEN, from_millis, resolve_time
from .template import StringTemplateLoader

logger = logging.getLogger(__name__)

DATE_FORMAT_MMDDYYYY = "%m/%d/%Y"
DATE_FORMAT_YYYY_MM_DD = "%Y-%m-%d"
DATE_FORMAT_MMM_DD_YYYY = "%b %d, %Y"

CURRENCY_HELPERS = {
    "dollarsNoSign": format_dollars_no_sign,
    "dollarsWithSign": format_dollars_with_sign,
    "dollarsAndCentsNoSign": format_dollars_and_cents_no_sign,
    "dollarsAndCentsWithSign": format_dollars_and_cents_with_sign,
}


def _format_long(dt) -> str:
    # "MMMM d, yyyy": day of month without zero padding
    return f"{dt:%B} {dt.day}, {dt:%Y}"


DATE_HELPERS = {
    "date_short": lambda dt: dt.strftime(DATE_FORMAT_MMDDYYYY),
    "date_yyyy_mm_dd": lambda dt: dt.strftime(DATE_FORMAT_YYYY_MM_DD),
    "date_mmm_dd_yyyy": lambda dt: dt.strftime(DATE_FORMAT_MMM_DD_YYYY),
    "date_long": _format_long,
}


def is_empty(src: Any) -> bool:
    """None, undefined, blank strings and numeric zero count as empty."""
    if src is None or isinstance(src, Undefined):
        return True
    if isinstance(src, str):
        return src.strip() in ("", "0")
    if isinstance(src, bool):
        return not src
    if isinstance(src, (int, float)):
        return src == 0
    return False


def currency_helper(formatter: Callable[[Any], str]) -> Callable[[Any], Markup]:
    """Wrap a cents formatter as a template helper."""
    def helper(src=None):
        if is_empty(src):
            return Markup("")
        return Markup(formatter(src))
    helper.__name__ = formatter.__name__
    return helper


def date_helper(formatter: Callable[[Any], str], tz=None) -> Callable[[Any], Markup]:
    """Wrap a datetime formatter as a template helper resolving time expressions."""
    def helper(src=None):
        if is_empty(src):
            src = NOW_TOKEN
        millis = resolve_time(src, tz=tz)
        return Markup(formatter(from_millis(millis, tz)))
    return helper


def _install(environment: Environment, helpers: Dict[str, Callable]):
    for name, helper in helpers.items():
        environment.globals[name] = helper
        environment.filters[name] = helper


def register_currency_helpers(environment: Environment) -> None:
    """Register the four dollar formatting helpers."""
    _install(environment, {
        name: currency_helper(formatter) for name, formatter in CURRENCY_HELPERS.items()
    })


def register_date_helpers(environment: Environment, config: Optional[RenderConfig] = None) -> None:
    """Register the four date formatting helpers for the configured timezone."""
    tz = (config or RenderConfig()).tzinfo
    _install(environment, {
        name: date_helper(formatter, tz) for name, formatter in DATE_HELPERS.items()
    })


def register_helpers(environment: Environment, config: Optional[RenderConfig] = None) -> None:
    """
    Register every currency and date helper on ``environment``.

    Calling this again replaces the helpers with equivalent ones.
    """
    register_currency_helpers(environment)
    register_date_helpers(environment, config)
    render_logger.helpers_registered(
        list(CURRENCY_HELPERS) + list(DATE_HELPERS), id(environment)
    )


def create_environment(config: Optional[RenderConfig] = None) -> Environment:
    """
    Build a Jinja2 environment for string templates with all helpers registered.

    Args:
        config: Rendering configuration; defaults to ``RenderConfig()``

    Returns:
        A ready-to-share environment
    """
    config = config or RenderConfig()
    configure_logging(config.log_level)
    environment = Environment(
        loader=StringTemplateLoader(config.source_name),
        undefined=StrictUndefined if config.strict_undefined else Undefined,
        autoescape=config.autoescape,
        cache_size=config.cache_size,
    )
    register_helpers(environment, config)
    return environment
