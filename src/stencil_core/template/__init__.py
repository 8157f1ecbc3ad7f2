"""Template Engine: parse and render {{ }} templates."""

from .context import Context, Value
from .engine import TemplateEngine, render_from_string
from .nodes import Float, Identifier, Int, Math, Node, Root, Text, VariableBlock
from .parser import Parser, parse
from .renderer import Renderer
from .types import RenderResult

__all__ = [
    "TemplateEngine",
    "render_from_string",
    "RenderResult",
    "Parser",
    "parse",
    "Renderer",
    "Context",
    "Value",
    # Nodes
    "Node",
    "Root",
    "Text",
    "VariableBlock",
    "Identifier",
    "Int",
    "Float",
    "Math",
]
