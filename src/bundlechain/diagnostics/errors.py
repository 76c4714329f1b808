"""bundlechain exception hierarchy with structured diagnostics.

All exceptions optionally carry a Diagnostic object for rich error
information. None of these escape Translator.translate(): resource and
template problems degrade to fallback text there. They are raised by the
lower-level components (formats, template compiler) and are part of the
public API for callers who use those components directly.

Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic


class BundleChainError(Exception):
    """Base exception for all bundlechain errors.

    Attributes:
        diagnostic: Structured diagnostic information (optional)
    """

    def __init__(self, message: str | Diagnostic) -> None:
        """Initialize BundleChainError.

        Args:
            message: Error message string OR Diagnostic object
        """
        if isinstance(message, Diagnostic):
            self.diagnostic: Diagnostic | None = message
            super().__init__(message.format_error())
        else:
            self.diagnostic = None
            super().__init__(message)


class ResourceFormatError(BundleChainError):
    """Resource bytes could not be read or parsed by the selected bundle format.

    Examples:
    - Malformed JSON, or a JSON document whose top level is not an object
    - Malformed \\uXXXX escape in a properties file
    - Resource larger than MAX_RESOURCE_SIZE or not valid UTF-8
    - Stream that fails while being read

    Recovery: the tier is treated as unavailable.
    """


class TemplateSyntaxError(BundleChainError):
    """Template text could not be compiled.

    Examples:
    - Non-numeric placeholder: "Hello {name}"
    - Unmatched braces: "Hello {0"
    - Unknown format type: "{0,money}"

    Recovery: placeholder rewrite, then the caller's fallback.

    Attributes:
        template: The template text that failed to compile
    """

    def __init__(self, message: str | Diagnostic, *, template: str = "") -> None:
        """Initialize TemplateSyntaxError.

        Args:
            message: Error message string OR Diagnostic object
            template: The template text that failed to compile
        """
        super().__init__(message)
        self.template = template


class TemplateFormatError(BundleChainError):
    """Compiled template rejected an argument at apply time.

    Example:
        "{0,number,currency}" applied to ("abc",)

    Recovery: defanged rendering with placeholders shown as [index].

    Attributes:
        argument_index: Index of the offending argument
    """

    def __init__(self, message: str | Diagnostic, *, argument_index: int = -1) -> None:
        """Initialize TemplateFormatError.

        Args:
            message: Error message string OR Diagnostic object
            argument_index: Index of the offending argument
        """
        super().__init__(message)
        self.argument_index = argument_index
