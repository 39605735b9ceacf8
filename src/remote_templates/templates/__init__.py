"""
Template compilation, caching and rendering.
"""

from .cache import TemplateCache
from .compiler import CompiledTemplate, TemplateCompiler
from .target import BufferTarget, append_html

__all__ = [
    'TemplateCache',
    'TemplateCompiler',
    'CompiledTemplate',
    'BufferTarget',
    'append_html',
]
