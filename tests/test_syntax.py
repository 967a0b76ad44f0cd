"""
Tests for the mutable syntax tree, builders and query helpers.
"""

import pytest

from nativize.errors import JavaScriptSyntaxError, NativizeError
from nativize.syntax import builders as b
from nativize.syntax.nodes import parse
from nativize.syntax.queries import (
    call_arguments,
    is_literal,
    property_name,
    statement_of,
    string_value,
    unparenthesize,
)


class TestRoundTrip:
    """Rendering an untouched tree reproduces the input exactly."""

    @pytest.mark.parametrize(
        "source",
        [
            "",
            "\n\n",
            "var a = 1;\n",
            "  // leading comment\nfoo( a ,b );  /* trailing */\n",
            "const s = `x ${y} z`;\nconst t = 'héllo';\n",
            "if (a) {\r\n  b();\r\n}\r\n",
            "class A { #x = 1; get y() { return this.#x; } }\n",
            "import $ from 'jquery';\nexport default function () {}\n",
            "#!/usr/bin/env node\nconsole.log(1)",
        ],
    )
    def test_lossless(self, source):
        """Test that whitespace, comments and tokens all survive."""
        assert parse(source).render() == source

    def test_invalid_source_raises(self):
        """Test that a syntax error is reported with its position."""
        with pytest.raises(JavaScriptSyntaxError) as excinfo:
            parse("var x = ;\n")
        assert excinfo.value.line == 1
        assert isinstance(excinfo.value, NativizeError)

    def test_unterminated_call_raises(self):
        """Test that a missing token is an error, not a partial tree."""
        with pytest.raises(JavaScriptSyntaxError):
            parse("foo(")


class TestMutation:
    """Tests for replace_with, remove and clone."""

    def test_replace_keeps_prefix(self, node_by_code):
        """Test that the replaced node's leading whitespace is kept."""
        root = parse("foo(  a);")
        node_by_code(root, "a", "identifier").replace_with(b.identifier("b"))
        assert root.render() == "foo(  b);"

    def test_replace_adds_parentheses_for_member_object(self, node_by_code):
        """Test that a binary expression placed as an object is parenthesised."""
        root = parse("a.b;")
        target = node_by_code(root, "a", "identifier")
        target.replace_with(b.binary(b.identifier("x"), "+", b.identifier("y")))
        assert root.render() == "(x + y).b;"

    def test_replace_in_unary_operand(self, node_by_code):
        """Test that a looser expression under a unary operator is parenthesised."""
        root = parse("-f();")
        node_by_code(root, "f()").replace_with(b.binary(b.identifier("a"), "**", b.number(2)))
        assert root.render() == "-(a ** 2);"

    def test_replace_detaches_replaced_node(self, node_by_code):
        """Test that the old node no longer belongs to the tree."""
        root = parse("f(a);")
        old = node_by_code(root, "a", "identifier")
        old.replace_with(b.identifier("z"))
        assert old.parent is None
        assert not old.is_attached(root)

    def test_moving_a_node_detaches_it(self, node_by_code):
        """Test that reusing a live node moves it instead of sharing it."""
        root = parse("f(a, b);")
        a = node_by_code(root, "a", "identifier")
        call = node_by_code(root, "f(a, b)")
        call.replace_with(b.method_call(a, "focus"))
        assert root.render() == "a.focus();"

    def test_remove_hands_prefix_on(self):
        """Test that removing a statement keeps the file's leading layout."""
        root = parse('"use strict";\nfoo();\n')
        root.children[0].remove()
        assert root.render() == "foo();\n"

    def test_clone_is_deep_and_detached(self, node_by_code):
        """Test that a clone shares no nodes with the original."""
        root = parse("f(g(x));")
        original = node_by_code(root, "g(x)")
        copy = original.clone()
        assert copy.parent is None
        assert copy.code == original.code
        assert all(a is not c for a, c in zip(original.walk(), copy.walk()))

    def test_replace_detached_node_raises(self):
        """Test that a node without a parent cannot be replaced."""
        with pytest.raises(ValueError):
            b.identifier("a").replace_with(b.identifier("b"))


class TestBuilders:
    """Tests for node builders."""

    def test_method_call(self):
        """Test building obj.name(args)."""
        node = b.method_call(b.identifier("el"), "setAttribute", [b.string_literal("id"), b.number(1)])
        assert node.code == 'el.setAttribute("id", 1)'

    def test_string_literal_escapes(self):
        """Test escaping for both quote styles."""
        assert b.string_literal('a"b').code == '"a\\"b"'
        assert b.string_literal("it's", quote="'").code == "'it\\'s'"
        assert b.string_literal("").code == '""'

    def test_binary_parenthesises_nested_operands(self):
        """Test that nested binary operands never rely on precedence."""
        inner = b.binary(b.identifier("a"), "+", b.identifier("b"))
        assert b.binary(inner, "*", b.identifier("c")).code == "(a + b) * c"

    def test_exponent_left_unary(self):
        """Test that a unary base of ** is parenthesised."""
        base = b.unary("-", b.identifier("a"))
        assert b.binary(base, "**", b.number(2)).code == "(-a) ** 2"

    def test_unary_word_operator(self):
        """Test that word operators are separated from their operand."""
        assert b.unary("typeof", b.identifier("x")).code == "typeof x"
        assert b.unary("!", b.method_call(b.identifier("a"), "includes", [b.identifier("v")])).code == (
            "!a.includes(v)"
        )

    def test_new_expression_with_object(self):
        """Test building new Event(...) with an options object."""
        options = b.object_literal([("bubbles", b.boolean(True))])
        node = b.new_expression(b.identifier("Event"), [b.string_literal("change"), options])
        assert node.code == 'new Event("change", { bubbles: true })'

    def test_assignment(self):
        """Test plain and compound assignment."""
        target = b.member(b.member(b.identifier("el"), "style"), "display")
        assert b.assignment(target, b.string_literal("none")).code == 'el.style.display = "none"'
        assert b.assignment(b.identifier("n"), b.number(1), "+=").code == "n += 1"

    def test_formal_parameters(self):
        """Test building a parameter list."""
        params = b.formal_parameters([b.identifier("v"), b.identifier("i")])
        assert params.code == "(v, i)"

    def test_spread_array(self):
        """Test building [...x] and an empty array."""
        assert b.array_literal([b.spread_element(b.identifier("xs"))]).code == "[...xs]"
        assert b.array_literal([]).code == "[]"

    def test_arrow_function(self):
        """Test an expression-bodied arrow, with an object body parenthesised."""
        test = b.binary(b.identifier("c"), "!==", b.identifier("el"))
        assert b.arrow_function([b.identifier("c")], test).code == "(c) => c !== el"
        body = b.object_literal([("a", b.number(1))])
        assert b.arrow_function([], body).code == "() => ({ a: 1 })"

    def test_optional_member(self):
        assert b.member(b.identifier("a"), "b", optional=True).code == "a?.b"


class TestQueries:
    """Tests for read-only query helpers."""

    def test_string_value_decodes_escapes(self):
        """Test that escape sequences are decoded."""
        root = parse('"a\\nb\\u0041\\x42";')
        assert string_value(root.find("string")[0]) == "a\nbAB"

    def test_template_without_substitution(self):
        """Test that a plain template literal has a value."""
        root = parse("`ab`;")
        assert string_value(root.find("template_string")[0]) == "ab"

    def test_template_with_substitution_has_no_value(self):
        """Test that a template with substitutions is not a literal."""
        root = parse("`a${b}`;")
        assert string_value(root.find("template_string")[0]) is None

    def test_legacy_octal_escape_has_no_value(self):
        """Test that ambiguous legacy escapes are refused."""
        root = parse('"\\1";')
        assert string_value(root.find("string")[0]) is None

    def test_call_arguments_skip_comments(self, node_by_code):
        """Test that comments are not arguments."""
        root = parse("f(a, /* c */ b);")
        args = call_arguments(node_by_code(root, "f(a, /* c */ b)"))
        assert [a.code for a in args] == ["a", "b"]

    def test_property_name(self, node_by_code):
        """Test plain, computed and private property names."""
        root = parse("a.b; a[b]; class C { #p; m() { this.#p; } }")
        assert property_name(node_by_code(root, "a.b")) == "b"
        assert property_name(node_by_code(root, "a[b]")) is None
        assert property_name(node_by_code(root, "this.#p")) is None

    def test_is_literal(self, node_by_code):
        """Test literal detection."""
        root = parse("f(1, 'a', null, x, `t${x}`);")
        args = call_arguments(node_by_code(root, "f(1, 'a', null, x, `t${x}`)"))
        assert [is_literal(a) for a in args] == [True, True, True, False, False]

    def test_statement_of_looks_through_parentheses(self, node_by_code):
        """Test that a parenthesised expression statement is found."""
        root = parse("(f());")
        call = node_by_code(root, "f()")
        assert statement_of(call) is root.children[0]
        assert unparenthesize(root.children[0].children[0]) is call
