"""
Compiles raw markup with {{ expression }} placeholders into render functions.
"""
import json
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Set

from jinja2 import (
    Environment,
    StrictUndefined,
    TemplateError as JinjaTemplateError,
    TemplateSyntaxError,
    Undefined,
    meta,
)

from ..error.exceptions import ErrorContext, TemplateCompileError, TemplateRenderError

logger = logging.getLogger(__name__)


def _none_as_empty(value: Any) -> Any:
    return "" if value is None else value


class CompiledTemplate:
    """
    Render function produced by TemplateCompiler.

    Calling it with a variable mapping returns the finished string.
    """

    def __init__(self, name: Optional[str], template, source: str):
        self.name = name
        self.source = source
        self._template = template

    def __call__(self, variables: Optional[Mapping[str, Any]] = None) -> str:
        try:
            return self._template.render(**dict(variables or {}))
        except JinjaTemplateError as e:
            raise TemplateRenderError(
                self.name, str(e), context=ErrorContext(component="CompiledTemplate", operation="render")
            ) from e

    def __repr__(self) -> str:
        return f"<CompiledTemplate {self.name!r}>"


class TemplateCompiler:
    """
    Jinja2-backed compiler with instance-scoped interpolation delimiters.
    """

    def __init__(
        self,
        variable_start_string: str = "{{",
        variable_end_string: str = "}}",
        block_start_string: str = "{%%",
        block_end_string: str = "%%}",
        comment_start_string: str = "{##",
        comment_end_string: str = "##}",
        autoescape: bool = False,
        strict_undefined: bool = True,
        filters: Optional[Dict[str, Callable]] = None,
    ):
        """
        Initialize the compiler.

        Args:
            variable_start_string: Opening interpolation delimiter
            variable_end_string: Closing interpolation delimiter
            block_start_string: Opening statement delimiter
            block_end_string: Closing statement delimiter
            comment_start_string: Opening comment delimiter
            comment_end_string: Closing comment delimiter
            autoescape: HTML-escape interpolated values
            strict_undefined: Raise on undefined variables instead of rendering ""
            filters: Extra filters made available to templates
        """
        self.variable_start_string = variable_start_string
        self.variable_end_string = variable_end_string
        self.env = Environment(
            variable_start_string=variable_start_string,
            variable_end_string=variable_end_string,
            block_start_string=block_start_string,
            block_end_string=block_end_string,
            comment_start_string=comment_start_string,
            comment_end_string=comment_end_string,
            autoescape=autoescape,
            undefined=StrictUndefined if strict_undefined else Undefined,
            keep_trailing_newline=True,
            finalize=_none_as_empty,
        )

        self.env.filters['to_json'] = lambda v: json.dumps(v)
        if filters:
            self.env.filters.update(filters)

    @classmethod
    def from_config(cls, config) -> "TemplateCompiler":
        """Build a compiler from a TemplateCacheConfiguration."""
        return cls(
            variable_start_string=config.variable_start_string,
            variable_end_string=config.variable_end_string,
            autoescape=config.autoescape,
            strict_undefined=config.strict_undefined,
        )

    def compile(self, raw: str, name: Optional[str] = None) -> CompiledTemplate:
        """
        Compile raw markup into a render function.

        Raises:
            TemplateCompileError: If the markup is malformed
        """
        try:
            template = self.env.from_string(raw)
        except TemplateSyntaxError as e:
            raise TemplateCompileError(
                name,
                e.message or str(e),
                lineno=e.lineno,
                context=ErrorContext(component="TemplateCompiler", operation="compile"),
            ) from e
        return CompiledTemplate(name, template, raw)

    def required_variables(self, raw: str) -> Set[str]:
        """Return the variable names a template reads but does not define."""
        try:
            ast = self.env.parse(raw)
        except TemplateSyntaxError as e:
            raise TemplateCompileError(None, e.message or str(e), lineno=e.lineno) from e
        return meta.find_undeclared_variables(ast)
