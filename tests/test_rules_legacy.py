"""
Tests for the legacy rule group.
"""

import pytest


class TestMathPow:
    def test_simple(self, rewrite):
        assert rewrite("var x = Math.pow(a, 2);") == "var x = a ** 2;"

    def test_operand_parenthesised(self, rewrite):
        assert rewrite("var x = Math.pow(a + 1, b);") == "var x = (a + 1) ** b;"

    def test_result_under_unary(self, rewrite):
        assert rewrite("var x = -Math.pow(a, 2);") == "var x = -(a ** 2);"

    def test_shadowed_math_is_kept(self, rewrite):
        source = "var Math = m; Math.pow(a, b);"
        assert rewrite(source) == source

    def test_spread_is_kept(self, rewrite):
        source = "Math.pow(...args);"
        assert rewrite(source) == source


class TestSubstr:
    def test_two_literal_arguments(self, rewrite):
        assert rewrite('var s = "hello".substr(1, 3);') == 'var s = "hello".slice(1, 4);'

    def test_single_argument(self, rewrite):
        assert rewrite('var s = "hello".substr(2);') == 'var s = "hello".slice(2);'

    def test_unknown_receiver_is_kept(self, rewrite):
        source = "var s = name.substr(1);"
        assert rewrite(source) == source

    def test_negative_start_is_kept(self, rewrite):
        source = 'var s = "abc".substr(-1, 1);'
        assert rewrite(source) == source


class TestIndexOf:
    def test_string_found(self, rewrite):
        assert rewrite('if ("abc".indexOf("b") !== -1) {}') == 'if ("abc".includes("b")) {}'

    def test_array_not_found(self, rewrite):
        assert rewrite("if ([1, 2].indexOf(2) === -1) {}") == "if (![1, 2].includes(2)) {}"

    def test_constant_on_left(self, rewrite):
        assert rewrite('if (-1 !== "abc".indexOf("b")) {}') == 'if ("abc".includes("b")) {}'

    def test_string_bound_argument(self, rewrite):
        source = 'const b = "b"; if ("abc".indexOf(b) !== -1) {}'
        assert rewrite(source) == 'const b = "b"; if ("abc".includes(b)) {}'

    @pytest.mark.parametrize(
        "source",
        [
            "if (s.indexOf('x') >= 0) {}",
            "if ([1, 2].indexOf(x) === -1) {}",
            "if ('abc'.indexOf(/b/) !== -1) {}",
            "const r = /a/; if ('abc'.indexOf(r) !== -1) {}",
            "if ('abc'.indexOf(pattern) !== -1) {}",
            "if ('abc'.indexOf('b') > 0) {}",
            "var i = 'abc'.indexOf('b');",
        ],
    )
    def test_kept(self, rewrite, source):
        assert rewrite(source) == source


class TestStartsWith:
    def test_index_of_zero(self, rewrite):
        assert rewrite('if ("abc".indexOf("a") === 0) {}') == 'if ("abc".startsWith("a")) {}'

    def test_negated_with_constant_on_left(self, rewrite):
        assert rewrite('if (0 !== "abc".indexOf("a")) {}') == 'if (!"abc".startsWith("a")) {}'

    def test_substring_of_bound_prefix(self, rewrite):
        source = 'const p = "ab"; if ("abc".substring(0, p.length) === p) {}'
        assert rewrite(source) == 'const p = "ab"; if ("abc".startsWith(p)) {}'

    def test_substring_of_literal_length(self, rewrite):
        source = 'if ("abc".substring(0, 2) !== "ab") {}'
        assert rewrite(source) == 'if (!"abc".startsWith("ab")) {}'

    @pytest.mark.parametrize(
        "source",
        [
            'if (s.indexOf("a") === 0) {}',
            'if ("abc".indexOf(/a/) === 0) {}',
            'if ("abc".indexOf("a") === 1) {}',
            'if ("abc".substring(0, 3) === "ab") {}',
            'if ("abc".substring(0, p.length) === p) {}',
            'if ("abc".substring(1, 2) === "b") {}',
            'if ("abc".lastIndexOf(x) === "abc".length - x.length) {}',
        ],
    )
    def test_kept(self, rewrite, source):
        assert rewrite(source) == source


class TestArrayFromSpread:
    @pytest.mark.parametrize(
        "source, expected",
        [
            ('var xs = Array.from("abc");', 'var xs = [..."abc"];'),
            ("var xs = Array.from(new Set(items));", "var xs = [...new Set(items)];"),
            (
                'var links = Array.from(document.querySelectorAll("a"));',
                'var links = [...document.querySelectorAll("a")];',
            ),
        ],
    )
    def test_iterable_argument(self, rewrite, source, expected):
        assert rewrite(source) == expected

    @pytest.mark.parametrize(
        "source",
        [
            "var xs = Array.from(arrayLike);",
            "var xs = Array.from({ length: 3 });",
            "var xs = Array.from([1, 2], (x) => x * 2);",
            'var Array = MyArray; var xs = Array.from("a");',
        ],
    )
    def test_kept(self, rewrite, source):
        """Test that array-likes and mapping calls keep Array.from."""
        assert rewrite(source) == source


class TestUseStrict:
    def test_removed_from_module(self, rewrite):
        source = '"use strict";\nimport a from "a";\n'
        assert rewrite(source) == 'import a from "a";\n'

    def test_kept_in_script(self, rewrite):
        source = '"use strict";\nfoo();\n'
        assert rewrite(source) == source

    def test_only_prologue_is_touched(self, rewrite):
        source = 'export const x = 1;\n"use strict";\n'
        assert rewrite(source) == source
