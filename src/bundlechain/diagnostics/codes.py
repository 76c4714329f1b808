"""Diagnostic codes and data structures.

Defines error codes and structured diagnostic messages shared by the
resource loaders, the template compiler and the translator.

Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass
from enum import Enum

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
]


class DiagnosticCode(Enum):
    """Error codes with unique identifiers.

    Organized by category:
        1000-1999: Resource errors (tier loading)
        3000-3999: Template errors (compilation and formatting)
    """

    # Resource errors (1000-1999)
    RESOURCE_UNREADABLE = 1001
    RESOURCE_MALFORMED = 1002

    # Template errors (3000-3999)
    TEMPLATE_INVALID = 3001
    TEMPLATE_ARGUMENT_MISMATCH = 3002


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured diagnostic message.

    Attributes:
        code: Unique error code
        message: Human-readable error description
        hint: Suggestion for fixing the error
        location: Resource name or template the error refers to
    """

    code: DiagnosticCode
    message: str
    hint: str | None = None
    location: str | None = None

    def __str__(self) -> str:
        """Return human-readable error description."""
        return self.message

    def format_error(self) -> str:
        """Format diagnostic for logs and exception messages.

        Example output:
            error[TEMPLATE_INVALID]: can't parse argument number: name
              --> Hello {name}
              = help: Placeholders are written {0}, {1,number} ...

        Control characters in the location are escaped so a hostile
        resource cannot forge extra log lines.

        Returns:
            Formatted error message
        """
        lines = [f"error[{self.code.name}]: {self.message}"]
        if self.location is not None:
            escaped = self.location.encode("unicode_escape").decode("ascii")
            lines.append(f"  --> {escaped}")
        if self.hint is not None:
            lines.append(f"  = help: {self.hint}")
        return "\n".join(lines)
