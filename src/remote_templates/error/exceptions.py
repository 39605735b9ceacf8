"""
Centralized exception definitions for the template cache.
"""
from typing import Optional


class ErrorContext:
    """Context information for errors."""

    def __init__(self, component: str = None, operation: str = None, **kwargs):
        self.component = component
        self.operation = operation
        self.details = kwargs


class TemplateCacheError(Exception):
    """Base class for all template cache errors."""

    def __init__(self, message: str, context: ErrorContext = None, details: dict = None):
        super().__init__(message)
        self.context = context or ErrorContext()
        self.details = details or {}

    def __str__(self):
        base_str = super().__str__()
        if self.context.component and self.context.operation:
            return f"{base_str} [in {self.context.component}.{self.context.operation}]"
        return base_str


class ConfigurationError(TemplateCacheError):
    """Error in configuration."""
    pass


class TemplateNotRegistered(TemplateCacheError):
    """Requested template name has no entry in the registry."""

    def __init__(self, name: str, context: ErrorContext = None):
        self.name = name
        super().__init__(f"Template not registered: {name!r}", context=context, details={"name": name})


class TransportError(TemplateCacheError):
    """Fetching template source failed (network error or non-success status)."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status: Optional[int] = None,
        context: ErrorContext = None,
    ):
        self.url = url
        self.status = status
        super().__init__(message, context=context, details={"url": url, "status": status})


class TemplateError(TemplateCacheError):
    """Error in template handling."""
    pass


class TemplateCompileError(TemplateError):
    """Raw markup could not be compiled."""

    def __init__(
        self,
        name: Optional[str],
        message: str,
        lineno: Optional[int] = None,
        context: ErrorContext = None,
    ):
        self.name = name
        self.lineno = lineno
        location = f" (line {lineno})" if lineno else ""
        super().__init__(
            f"Cannot compile template {name!r}{location}: {message}",
            context=context,
            details={"name": name, "lineno": lineno},
        )


class TemplateRenderError(TemplateError):
    """A compiled template failed while producing output."""

    def __init__(self, name: Optional[str], message: str, context: ErrorContext = None):
        self.name = name
        super().__init__(f"Cannot render template {name!r}: {message}", context=context, details={"name": name})
