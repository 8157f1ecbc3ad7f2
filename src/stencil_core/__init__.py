"""Stencil Core - a small {{ }} template engine.

Templates mix literal text with expression blocks holding a variable name,
a number, or arithmetic over those:

    >>> from stencil_core import render_from_string
    >>> render_from_string("Vat: {{ 100 * vat_rate }}", {"vat_rate": 0.2})
    'Vat: 20'
"""

from stencil_core.template import TemplateEngine, render_from_string

__version__ = "0.1.0"
__all__ = ["__version__", "TemplateEngine", "render_from_string"]
