"""
Stencil Templating Module

This module provides the rendering engine, including:
- Scalar and structural template rendering over nested mappings
- Reflective rendering of templated object properties
- Relative time expression resolution ("now1m0d,0m-5d")
- Currency and date template helpers
"""

from .config import RenderConfig
from .periods import MalformedTimeExpression, PeriodTerm, parse_time_expression, resolve_time
from .template import StringTemplateLoader, TemplateRenderError, render_string, render_tree
from .reflective import PropertyAccessor, discover_accessors, render_properties
from .helpers import create_environment, register_helpers

__version__ = "1.0.0"

__all__ = [
    'RenderConfig',
    'MalformedTimeExpression',
    'PeriodTerm',
    'parse_time_expression',
    'resolve_time',
    'StringTemplateLoader',
    'TemplateRenderError',
    'render_string',
    'render_tree',
    'PropertyAccessor',
    'discover_accessors',
    'render_properties',
    'create_environment',
    'register_helpers',
]
