"""Tests for heuristic boundary detection across language families."""

import pytest

from whycomment.scanning import BoundarySpan, SpanKind, detect_boundaries


def _spans(source, language):
    return [
        (s.name, s.kind, s.start_line, s.end_line)
        for s in detect_boundaries(source.splitlines(), language)
    ]


class TestIndentFamily:
    """Test the indentation strategy (Python)."""

    def test_block_ends_before_dedent(self):
        """A header's block ends before the next line indented no deeper."""
        spans = detect_boundaries(["def f():", "    x = 1", "y = 2"], "python")
        assert spans == [BoundarySpan("f", SpanKind.FUNCTION, 0, 1)]

    def test_block_runs_to_end_of_file(self):
        assert _spans("def f():\n    return 1", "python") == [("f", SpanKind.FUNCTION, 0, 1)]

    def test_methods_inside_class(self):
        source = (
            "class Cart:\n"
            "    def total(self):\n"
            "        return 0\n"
            "\n"
            "    async def refresh(self):\n"
            "        pass\n"
            "value = Cart()\n"
        )
        assert _spans(source, "python") == [
            ("Cart", SpanKind.CLASS, 0, 5),
            ("total", SpanKind.METHOD, 1, 3),
            ("refresh", SpanKind.METHOD, 4, 5),
        ]

    def test_tabs_count_as_four_columns(self):
        assert _spans("def g():\n\tpass\ny = 1", "python") == [("g", SpanKind.FUNCTION, 0, 1)]

    def test_trailing_blank_line_belongs_to_block(self):
        assert _spans("def f():\n    x = 1\n\ny = 2", "python") == [("f", SpanKind.FUNCTION, 0, 2)]

    def test_comment_lines_do_not_end_block(self):
        source = "def f():\n    x = 1\n# note\n    return x\ny = 2"
        assert _spans(source, "python") == [("f", SpanKind.FUNCTION, 0, 3)]

    def test_multiline_signature_and_docstring(self):
        source = (
            "def f(a,\n"
            "b):\n"
            '    """Doc.\n'
            "not code\n"
            '    """\n'
            "    return a\n"
            "x = 1\n"
        )
        assert _spans(source, "python") == [("f", SpanKind.FUNCTION, 0, 5)]

    def test_decorator_is_not_a_header(self):
        assert _spans("@cache\ndef f():\n    pass", "python") == [("f", SpanKind.FUNCTION, 1, 2)]


class TestBraceFamilies:
    """Test brace counting for C-like and Java-like languages."""

    TYPESCRIPT = (
        "export class Greeter {\n"
        "  greet(name: string): string {\n"
        "    if (name) {\n"
        "      return `hi ${name}`;\n"
        "    }\n"
        '    return "}";\n'
        "  }\n"
        "}\n"
        "export function add(a: number, b: number): number {\n"
        "  return a + b;\n"
        "}\n"
        "const twice = (x: number) => x * 2;\n"
    )

    def test_typescript(self):
        assert _spans(self.TYPESCRIPT, "typescript") == [
            ("Greeter", SpanKind.CLASS, 0, 7),
            ("greet", SpanKind.METHOD, 1, 6),
            ("add", SpanKind.FUNCTION, 8, 10),
            ("twice", SpanKind.FUNCTION, 11, 11),
        ]

    def test_control_flow_is_not_a_declaration(self):
        source = "if (ready) {\n  go();\n}\nwhile (x) {\n}\n"
        assert detect_boundaries(source.splitlines(), "javascript") == []

    def test_brace_on_next_line(self):
        source = "static int add(int a, int b)\n{\n    return a + b;\n}\n"
        assert _spans(source, "c") == [("add", SpanKind.FUNCTION, 0, 3)]

    def test_braces_in_comments_are_ignored(self):
        source = "function f() { // }\n  return 1;\n}\n"
        assert _spans(source, "javascript") == [("f", SpanKind.FUNCTION, 0, 2)]

    def test_unclosed_block_ends_at_last_line(self):
        source = "function f() {\n  return 1;\n"
        assert _spans(source, "javascript") == [("f", SpanKind.FUNCTION, 0, 1)]

    def test_leading_star_continuation_is_code(self):
        source = (
            "int area(int w, int h) {\n"
            "    return w\n"
            "        * h; }\n"
            "int next(void) {\n"
            "    return 1;\n"
            "}\n"
        )
        assert _spans(source, "c") == [
            ("area", SpanKind.FUNCTION, 0, 2),
            ("next", SpanKind.FUNCTION, 3, 5),
        ]

    def test_declarations_inside_block_comment_are_ignored(self):
        source = "/*\n * legacy(a) {\n */\nfunction current() {\n  return 0;\n}\n"
        assert _spans(source, "javascript") == [("current", SpanKind.FUNCTION, 3, 5)]

    def test_java_interface_signature_ends_at_header(self):
        source = (
            "public interface Repo {\n"
            "    void save(String item);\n"
            "    default int size() {\n"
            "        return 0;\n"
            "    }\n"
            "}\n"
        )
        assert _spans(source, "java") == [
            ("Repo", SpanKind.INTERFACE, 0, 5),
            ("save", SpanKind.METHOD, 1, 1),
            ("size", SpanKind.METHOD, 2, 4),
        ]

    def test_java_constructor_and_annotation(self):
        source = (
            "public class Counter {\n"
            "    private int count;\n"
            "    @Override\n"
            "    public String toString() {\n"
            '        return "Counter(" + count + ")";\n'
            "    }\n"
            "    public Counter(int start) {\n"
            "        this.count = start;\n"
            "    }\n"
            "}\n"
        )
        assert _spans(source, "java") == [
            ("Counter", SpanKind.CLASS, 0, 9),
            ("toString", SpanKind.METHOD, 3, 5),
            ("Counter", SpanKind.METHOD, 6, 8),
        ]


class TestReceiverFamily:
    """Test Go: receivers, struct/interface bodies and aliases."""

    GO = (
        "package main\n"
        "type Point struct {\n"
        "\tX, Y int\n"
        "}\n"
        "type ID = string\n"
        "type Shape interface {\n"
        "\tArea() float64\n"
        "}\n"
        "func (p *Point) Scale(f int) {\n"
        "\tp.X *= f\n"
        "}\n"
        "func main() {\n"
        "\tfmt.Println(map[string]interface{}{})\n"
        "}\n"
    )

    def test_go(self):
        assert _spans(self.GO, "go") == [
            ("Point", SpanKind.CLASS, 1, 3),
            ("ID", SpanKind.CLASS, 4, 4),
            ("Shape", SpanKind.INTERFACE, 5, 7),
            ("Scale", SpanKind.METHOD, 8, 10),
            ("main", SpanKind.FUNCTION, 11, 13),
        ]

    def test_braces_in_parameter_types(self):
        source = "func handle(v interface{}) error {\n\treturn nil\n}\n"
        assert _spans(source, "go") == [("handle", SpanKind.FUNCTION, 0, 2)]


class TestDispatch:
    @pytest.mark.parametrize("language", ["ruby", "unknown", None])
    def test_unsupported_language_has_no_spans(self, language):
        assert detect_boundaries(["def f", "end"], language) == []

    def test_family_name_is_accepted(self):
        lines = ["function f() {", "}"]
        assert detect_boundaries(lines, "c_like") == detect_boundaries(lines, "typescript")

    def test_span_invariant(self):
        with pytest.raises(ValueError):
            BoundarySpan("f", SpanKind.FUNCTION, 3, 2)
