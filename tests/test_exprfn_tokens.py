import pytest

from exprfn.exprfn_datatypes import DefinitionNotReady, InvalidApplication
from exprfn.exprfn_tokens import (
    INVALID_APPLICATION, TokenResult, ApplicationDefinition, ContextTokenSource,
    resolve_token, load_token_map, save_token_map,
)


@pytest.fixture
def source():
    s = ContextTokenSource()
    s.register(ApplicationDefinition("main", {"brand": "blue", "size": "12px"}), make_current=True)
    return s


def test_resolve_found(source):
    assert resolve_token(source, "brand") == TokenResult('found', "blue")


def test_resolve_missing_key(source):
    result = resolve_token(source, "missingKey")
    assert result.status == 'empty'
    assert result.collapse() == ""


@pytest.mark.parametrize("key", [None, ["brand"], 1])
def test_resolve_odd_keys_are_empty(source, key):
    assert resolve_token(source, key).collapse() == ""


def test_no_current_application_is_not_ready():
    s = ContextTokenSource()
    with pytest.raises(DefinitionNotReady):
        s.get_current_token_map()
    assert resolve_token(s, "brand") == TokenResult('empty')


def test_unregistered_current_application_is_not_ready():
    s = ContextTokenSource(current="later")
    assert resolve_token(s, "brand").collapse() == ""


def test_wrong_definition_type_is_invalid():
    s = ContextTokenSource({"main": {"brand": "blue"}}, current="main")
    with pytest.raises(InvalidApplication):
        s.get_current_token_map()
    assert resolve_token(s, "brand").collapse() == INVALID_APPLICATION


def test_definition_without_tokens_is_empty():
    s = ContextTokenSource({"main": ApplicationDefinition("main")}, current="main")
    assert resolve_token(s, "brand") == TokenResult('empty')


def test_callable_context():
    assert resolve_token(lambda: {"a": "b"}, "a").collapse() == "b"


def test_callable_context_raising_not_ready():
    def provider():
        raise DefinitionNotReady("loading")
    assert resolve_token(provider, "a").collapse() == ""


def test_unexpected_map_type_is_invalid():
    assert resolve_token(lambda: ["a"], "a").collapse() == INVALID_APPLICATION


def test_provider_raising_type_error_is_invalid():
    def provider():
        raise TypeError("resolved a component, not an application")
    assert resolve_token(provider, "a").collapse() == INVALID_APPLICATION


def test_non_string_token_values_are_stringified():
    assert resolve_token({"n": 3, "off": False}, "n").collapse() == "3"
    assert resolve_token({"n": 3, "off": False}, "off").collapse() == "false"


# --- Token files ---

def test_load_yaml(tmp_path):
    p = tmp_path / "app.yaml"
    p.write_text("brand: blue\nsize: 12\n", encoding="utf-8")
    assert load_token_map(p) == {"brand": "blue", "size": "12"}


def test_load_json(tmp_path):
    p = tmp_path / "app.json"
    p.write_text('{"brand": "blue", "on": true}', encoding="utf-8")
    assert load_token_map(p) == {"brand": "blue", "on": "true"}


def test_load_toml(tmp_path):
    p = tmp_path / "app.toml"
    p.write_text('brand = "blue"\n', encoding="utf-8")
    assert load_token_map(p) == {"brand": "blue"}


def test_load_xml(tmp_path):
    p = tmp_path / "app.tokens"
    p.write_text(
        '<tokens><token name="brand" value="blue"/><token name="size" value="12px"/></tokens>',
        encoding="utf-8",
    )
    assert load_token_map(p) == {"brand": "blue", "size": "12px"}


def test_load_xml_single_and_empty(tmp_path):
    single = tmp_path / "one.xml"
    single.write_text('<tokens><token name="a" value="b"/></tokens>', encoding="utf-8")
    assert load_token_map(single) == {"a": "b"}
    empty = tmp_path / "none.xml"
    empty.write_text('<tokens/>', encoding="utf-8")
    assert load_token_map(empty) == {}


def test_load_empty_yaml_file(tmp_path):
    p = tmp_path / "blank.yaml"
    p.write_text("", encoding="utf-8")
    assert load_token_map(p) == {}


def test_load_non_mapping_raises(tmp_path):
    p = tmp_path / "list.yaml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_token_map(p)


@pytest.mark.parametrize("suffix", [".json", ".yaml", ".xml"])
def test_save_then_load(tmp_path, suffix):
    p = tmp_path / f"app{suffix}"
    save_token_map(p, {"brand": "blue", "size": "12px"})
    assert load_token_map(p) == {"brand": "blue", "size": "12px"}


def test_definition_from_file(tmp_path):
    p = tmp_path / "shop.yaml"
    p.write_text("brand: blue\n", encoding="utf-8")
    definition = ApplicationDefinition.from_file(p)
    assert definition.name == "shop"
    s = ContextTokenSource()
    s.register(definition, make_current=True)
    assert resolve_token(s, "brand").collapse() == "blue"


@pytest.mark.parametrize(
    "content, expected",
    [
        ('<tokens><token name="brand" value="blue"/></tokens>', {"brand": "blue"}),
        ('{"brand": "blue"}', {"brand": "blue"}),
        ("brand: blue\n", {"brand": "blue"}),
    ],
    ids=["xml", "json", "yaml"],
)
def test_load_unknown_extension_sniffs_format(tmp_path, content, expected):
    p = tmp_path / "app.cfg"
    p.write_text(content, encoding="utf-8")
    assert load_token_map(p) == expected


def test_explicit_fmt_overrides_extension(tmp_path):
    p = tmp_path / "app.txt"
    p.write_text('<tokens><token name="a" value="b"/></tokens>', encoding="utf-8")
    assert load_token_map(p, fmt="xml") == {"a": "b"}
