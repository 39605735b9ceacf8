"""
Error handling exceptions.
"""
from .exceptions import (
    ErrorContext,
    TemplateCacheError,
    ConfigurationError,
    TemplateNotRegistered,
    TransportError,
    TemplateError,
    TemplateCompileError,
    TemplateRenderError,
)

__all__ = [
    'ErrorContext',
    'TemplateCacheError',
    'ConfigurationError',
    'TemplateNotRegistered',
    'TransportError',
    'TemplateError',
    'TemplateCompileError',
    'TemplateRenderError',
]
