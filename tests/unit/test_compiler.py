import pytest

from remote_templates.config import TemplateCacheConfiguration
from remote_templates.error.exceptions import TemplateCompileError, TemplateRenderError
from remote_templates.templates.compiler import CompiledTemplate, TemplateCompiler


@pytest.fixture
def compiler():
    return TemplateCompiler()


def test_interpolates_variables(compiler):
    render = compiler.compile("Hello {{ name }}!", name="greet")
    assert isinstance(render, CompiledTemplate)
    assert render({"name": "World"}) == "Hello World!"


def test_interpolates_expressions(compiler):
    render = compiler.compile("{{ a + b }} {{ user.name | upper }}")
    assert render({"a": 1, "b": 2, "user": {"name": "ada"}}) == "3 ADA"


def test_keeps_trailing_newline(compiler):
    assert compiler.compile("<p>{{ x }}</p>\n")({"x": 1}) == "<p>1</p>\n"


def test_no_escaping_by_default(compiler):
    assert compiler.compile("{{ html }}")({"html": "<b>bold</b>"}) == "<b>bold</b>"


def test_autoescape():
    compiler = TemplateCompiler(autoescape=True)
    assert compiler.compile("{{ html }}")({"html": "<b>"}) == "&lt;b&gt;"


def test_to_json_filter(compiler):
    assert compiler.compile("{{ data | to_json }}")({"data": {"a": 1}}) == '{"a": 1}'


def test_custom_filters():
    compiler = TemplateCompiler(filters={"shout": lambda s: s + "!"})
    assert compiler.compile("{{ word | shout }}")({"word": "hey"}) == "hey!"


def test_strict_undefined_raises(compiler):
    render = compiler.compile("Hello {{ name }}!", name="greet")
    with pytest.raises(TemplateRenderError) as excinfo:
        render({})
    assert excinfo.value.name == "greet"


def test_lenient_undefined_renders_empty():
    compiler = TemplateCompiler(strict_undefined=False)
    assert compiler.compile("Hello {{ name }}!")() == "Hello !"


def test_delimiters_are_per_instance():
    default = TemplateCompiler()
    square = TemplateCompiler("[[", "]]")

    assert square.compile("Hi [[ name ]] {{ name }}")({"name": "A"}) == "Hi A {{ name }}"
    assert default.compile("Hi [[ name ]] {{ name }}")({"name": "A"}) == "Hi [[ name ]] A"


def test_malformed_markup_raises_compile_error(compiler):
    with pytest.raises(TemplateCompileError) as excinfo:
        compiler.compile("line one\n{{ broken", name="bad")
    assert excinfo.value.name == "bad"
    assert excinfo.value.lineno is not None
    assert "bad" in str(excinfo.value)


def test_required_variables(compiler):
    source = "{{ title }}{%% for item in items %%}{{ item }}{%% endfor %%}"
    assert compiler.required_variables(source) == {"title", "items"}


def test_from_config():
    config = TemplateCacheConfiguration(
        variable_start_string="<%=",
        variable_end_string="%>",
        strict_undefined=False,
    )
    compiler = TemplateCompiler.from_config(config)
    assert compiler.compile("x=<%= x %>")({"x": 5}) == "x=5"
    assert compiler.compile("<%= missing %>")() == ""


def test_none_renders_empty(compiler):
    render = compiler.compile("Hello {{ name }}!")
    assert render({"name": None}) == "Hello !"
    assert render({"name": 0}) == "Hello 0!"


def test_none_renders_empty_when_lenient():
    compiler = TemplateCompiler(strict_undefined=False)
    assert compiler.compile("[{{ a }}|{{ b }}]")({"a": None}) == "[|]"


def test_brace_percent_and_brace_hash_are_literal(compiler):
    source = "<style>a{#x}</style><script>if (x{%y) {}</script> {{ name }}"
    rendered = compiler.compile(source)({"name": "ok"})
    assert rendered == "<style>a{#x}</style><script>if (x{%y) {}</script> ok"


def test_statements_use_double_percent(compiler):
    render = compiler.compile("{%% for i in items %%}[{{ i }}]{%% endfor %%}{## note ##}")
    assert render({"items": [1, 2]}) == "[1][2]"


def test_compile_error_names_operation(compiler):
    with pytest.raises(TemplateCompileError) as excinfo:
        compiler.compile("{{ broken", name="bad")
    assert str(excinfo.value).endswith("[in TemplateCompiler.compile]")


def test_render_error_names_operation(compiler):
    with pytest.raises(TemplateRenderError) as excinfo:
        compiler.compile("{{ missing }}", name="greet")()
    assert excinfo.value.context.component == "CompiledTemplate"
    assert "[in CompiledTemplate.render]" in str(excinfo.value)
