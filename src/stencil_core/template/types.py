"""Template Engine type definitions."""

from dataclasses import dataclass, field


@dataclass
class RenderResult:
    """Result of template rendering."""

    output: str  # Rendered text
    had_templates: bool  # Whether any {{ }} blocks were found
    references: list[str] = field(default_factory=list)  # Identifiers the template reads
