"""Tests for the lexical TypeScript/JavaScript entity extractor."""

from pathlib import Path

from autodocs.parser import (
    EntityExtractor,
    brace_delta,
    extract_description,
    extract_entities,
    parse_parameters,
)

FIXTURE_SRC = Path(__file__).parent / "fixtures" / "ts_project" / "src"


def _by_name(entities):
    return {entity.name: entity for entity in entities}


class TestExtractorBasics:
    """Smoke tests on a small inline snippet."""

    def test_extracts_every_kind(self, sample_ts_code: str):
        entities = extract_entities(sample_ts_code)

        assert [f.name for f in entities.functions] == ["testFunction"]
        assert [c.name for c in entities.classes] == ["TestClass"]
        assert [i.name for i in entities.interfaces] == ["TestInterface"]
        assert [t.name for t in entities.types] == ["TestType"]

    def test_function_details(self, sample_ts_code: str):
        func = extract_entities(sample_ts_code).functions[0]

        assert func.is_exported
        assert not func.is_async
        assert func.return_type == "string"
        assert func.description == "A test function"
        assert func.declaration_line == 5
        assert [(p.name, p.type, p.is_optional) for p in func.parameters] == [
            ("param1", "string", False),
            ("param2", "number", True),
        ]

    def test_class_members(self, sample_ts_code: str):
        cls = extract_entities(sample_ts_code).classes[0]

        assert [m.name for m in cls.methods] == ["method"]
        assert cls.methods[0].return_type == "void"
        assert [p.name for p in cls.properties] == ["property"]
        assert cls.properties[0].type == "string"

    def test_type_definition_drops_semicolon(self, sample_ts_code: str):
        alias = extract_entities(sample_ts_code).types[0]
        assert alias.definition == "string | number"
        assert alias.is_exported

    def test_empty_content(self):
        entities = extract_entities("")
        assert entities.functions == []
        assert entities.classes == []
        assert entities.interfaces == []
        assert entities.types == []

    def test_unannotated_function_is_not_detected(self):
        entities = extract_entities("function add(a, b) {\n  return a + b;\n}\n")
        assert entities.functions == []

    def test_garbage_input_does_not_raise(self):
        entities = extract_entities("class {{{ ((( interface ::: type = \n}}}}")
        assert entities.functions == []


class TestFixtureFunctions:
    """Function extraction against tests/fixtures/ts_project/src/math.ts."""

    def setup_method(self):
        content = (FIXTURE_SRC / "math.ts").read_text(encoding="utf-8")
        self.functions = _by_name(EntityExtractor().extract(content).functions)

    def test_all_annotated_functions_found(self):
        assert set(self.functions) == {"addTax", "roundMoney", "internalHelper", "fetchRates"}

    def test_declaration_lines_are_one_based(self):
        assert self.functions["addTax"].declaration_line == 5
        assert self.functions["roundMoney"].declaration_line == 12
        assert self.functions["internalHelper"].declaration_line == 14
        assert self.functions["fetchRates"].declaration_line == 18

    def test_export_and_async_flags(self):
        assert self.functions["addTax"].is_exported
        assert not self.functions["internalHelper"].is_exported
        assert self.functions["fetchRates"].is_async
        assert not self.functions["addTax"].is_async

    def test_arrow_function_return_type(self):
        arrow = self.functions["roundMoney"]
        assert arrow.return_type == "number"
        assert arrow.description == "Round a value to two decimals."
        assert [p.name for p in arrow.parameters] == ["value"]

    def test_generic_return_type(self):
        assert self.functions["fetchRates"].return_type == "Promise<number[]>"

    def test_tag_line_stops_description(self):
        # The @param line is nearest the declaration, so the walk stops there.
        assert self.functions["addTax"].description == ""

    def test_no_comment_means_empty_description(self):
        assert self.functions["internalHelper"].description == ""
        assert self.functions["fetchRates"].description == ""


class TestFixtureTypes:
    """Class, interface and alias extraction against models.ts."""

    def setup_method(self):
        content = (FIXTURE_SRC / "models.ts").read_text(encoding="utf-8")
        self.entities = EntityExtractor().extract(content)

    def test_no_methods_leak_into_functions(self):
        assert self.entities.functions == []

    def test_class_header(self):
        classes = _by_name(self.entities.classes)
        store = classes["InvoiceStore"]

        assert store.is_exported
        assert store.declaration_line == 16
        assert store.extends == "BaseStore"
        assert store.implements == ["Iterable<Invoice>", "Countable"]
        assert store.description == "Stores invoices in memory."
        assert not classes["HiddenCache"].is_exported

    def test_class_methods(self):
        store = _by_name(self.entities.classes)["InvoiceStore"]
        methods = _by_name(store.methods)

        assert list(methods) == ["add", "empty", "flush"]
        assert methods["add"].declaration_line == 28
        assert methods["add"].description == "Add an invoice to the store."
        assert methods["empty"].is_static
        assert methods["flush"].is_private
        assert methods["flush"].is_async
        assert methods["flush"].return_type == "Promise<void>"

    def test_class_properties(self):
        store = _by_name(self.entities.classes)["InvoiceStore"]
        props = _by_name(store.properties)

        assert list(props) == ["items", "name"]
        assert props["items"].type == "Invoice[]"
        assert props["name"].is_readonly

    def test_interface(self):
        iface = self.entities.interfaces[0]

        assert iface.name == "Customer"
        assert iface.declaration_line == 4
        assert iface.description == "A customer of the billing system."
        assert iface.extends is None

        props = _by_name(iface.properties)
        assert list(props) == ["id", "email", "createdAt"]
        assert props["email"].is_optional
        assert props["createdAt"].is_readonly
        assert props["createdAt"].type == "Date"
        assert [m.name for m in iface.methods] == ["describe"]
        assert iface.methods[0].return_type == "string"

    def test_type_alias(self):
        alias = self.entities.types[0]
        assert alias.name == "InvoiceStatus"
        assert alias.declaration_line == 11
        assert alias.definition == '"draft" | "sent" | "paid"'

    def test_direct_class_and_interface_helpers(self):
        lines = (FIXTURE_SRC / "models.ts").read_text(encoding="utf-8").split("\n")
        extractor = EntityExtractor()

        assert [c.name for c in extractor.extract_classes(lines)] == ["InvoiceStore", "HiddenCache"]
        assert [i.name for i in extractor.extract_interfaces(lines)] == ["Customer"]

    def test_interface_extends_list(self):
        entities = extract_entities("export interface Admin extends User, Auditable {\n  level: number;\n}\n")
        assert entities.interfaces[0].extends == ["User", "Auditable"]


class TestHelpers:
    """Parameter parsing, brace counting and doc-comment walking."""

    def test_parse_parameters_empty(self):
        assert parse_parameters("") == []
        assert parse_parameters("   ") == []

    def test_parse_parameters_untyped_defaults_to_any(self):
        params = parse_parameters("a, b")
        assert [(p.name, p.type, p.is_optional) for p in params] == [
            ("a", "any", False),
            ("b", "any", False),
        ]

    def test_parse_parameters_default_value(self):
        params = parse_parameters("limit: number = 10, verbose = false")
        assert params[0].type == "number"
        assert params[0].default_value == "10"
        assert params[1].name == "verbose"
        assert params[1].type == "any"
        assert params[1].default_value == "false"

    def test_brace_delta_ignores_strings_and_comments(self):
        assert brace_delta("class A {") == 1
        assert brace_delta('const s = "{{"; // }') == 0
        assert brace_delta("} else {") == 0

    def test_description_skips_blank_and_line_comments(self):
        lines = [
            "/**",
            " * Loads things.",
            " */",
            "",
            "// eslint-disable-next-line",
            "function load(): void {",
        ]
        assert extract_description(lines, 5) == "Loads things."

    def test_single_line_block_comment(self):
        lines = ["/** Quick helper. */", "function quick(): void {"]
        assert extract_description(lines, 1) == "Quick helper."

    def test_code_line_stops_walk(self):
        lines = ["/** Not mine. */", "const x = 1;", "function mine(): void {"]
        assert extract_description(lines, 2) == ""
