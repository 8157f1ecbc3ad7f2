"""Validation result types shared by the config loader and the engine."""

from dataclasses import dataclass, field


@dataclass
class ValidationIssue:
    """One problem found while checking a config mapping or a template."""

    path: str  # "engine.max_depth" for config, "invoice.txt:1:7" for templates
    message: str
    severity: str = "error"  # "error" | "warning"
    line: int | None = None
    column: int | None = None
    code: str | None = None  # Error code, when the issue maps to one


@dataclass
class ValidationResult:
    """Errors and warnings from one validation pass.

    ``valid`` is derived: a result holding any error is invalid whatever
    the caller passed.
    """

    valid: bool = True
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.errors:
            self.valid = False

    def add_error(
        self,
        path: str,
        message: str,
        line: int | None = None,
        column: int | None = None,
        code: str | None = None,
    ) -> None:
        self.errors.append(ValidationIssue(path, message, "error", line, column, code))
        self.valid = False

    def add_warning(self, path: str, message: str) -> None:
        self.warnings.append(ValidationIssue(path, message, "warning"))

    @property
    def messages(self) -> list[str]:
        """Error messages only, in the order they were found."""
        return [issue.message for issue in self.errors]
