"""
Remote Templates: fetch named templates over HTTP, compile them once and render them by name.
"""
import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .config import TemplateCacheConfiguration, load_config  # noqa: E402
from .error import (  # noqa: E402
    TemplateCacheError,
    TemplateCompileError,
    TemplateNotRegistered,
    TemplateRenderError,
    TransportError,
)
from .templates import BufferTarget, CompiledTemplate, TemplateCache, TemplateCompiler  # noqa: E402
from .transport import HttpTransport, LocalTransport, Transport  # noqa: E402

__all__ = [
    "TemplateCache",
    "TemplateCompiler",
    "CompiledTemplate",
    "BufferTarget",
    "TemplateCacheConfiguration",
    "load_config",
    "Transport",
    "HttpTransport",
    "LocalTransport",
    "TemplateCacheError",
    "TemplateNotRegistered",
    "TransportError",
    "TemplateCompileError",
    "TemplateRenderError",
    "__version__",
]
