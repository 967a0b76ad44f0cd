"""
Tests for the jquery rule group.

Each case runs the whole rule set to a fixed point, the way the CLI does.
"""

import pytest


def _check(rewrite, source, expected):
    assert rewrite(source) == expected


class TestSafetyScenarios:
    """End-to-end behavior of the safety analysis through the rules."""

    def test_alias_used_twice(self, rewrite):
        """Test that both uses of a single binding are rewritten."""
        _check(
            rewrite,
            "const el = $(node); el.show(); el.hide();",
            'const el = $(node); node.style.display = ""; node.style.display = "none";',
        )

    def test_reassigned_alias_is_left_alone(self, rewrite):
        source = "let el = $(node); el = other(); el.show();"
        _check(rewrite, source, source)

    def test_allow_listed_chain_is_eliminated(self, rewrite):
        """Test wrapper elimination with a configured allow-set."""
        result = rewrite(
            '$(document.querySelector("#app")).find(".x").show();',
            "unwrap-element-chains",
            transformable_members=frozenset({"find", "show"}),
        )
        assert result == 'document.querySelector("#app").find(".x").show();'

    def test_poisoned_chain_is_kept(self, rewrite):
        source = '$(document.querySelector("#app")).unknownMethod().show();'
        result = rewrite(
            source,
            "unwrap-element-chains",
            transformable_members=frozenset({"find", "show"}),
        )
        assert result == source

    def test_selector_receiver_is_not_an_element(self, rewrite):
        """Test that a collection built from a selector keeps jQuery semantics."""
        source = '$(".item").hide();'
        _check(rewrite, source, source)

    def test_shadowed_factory(self, rewrite):
        source = "function f($) { $(el).hide(); }"
        _check(rewrite, source, source)


class TestDisplay:
    def test_show(self, rewrite):
        _check(rewrite, "$(el).show();", 'el.style.display = "";')

    def test_hide_in_handler(self, rewrite):
        _check(
            rewrite,
            "function close() { $(this).hide(); }",
            'function close() { this.style.display = "none"; }',
        )

    def test_show_with_duration_is_kept(self, rewrite):
        source = "$(el).show(200);"
        _check(rewrite, source, source)

    def test_value_used_is_kept(self, rewrite):
        source = "var w = $(el).hide();"
        _check(rewrite, source, source)

    def test_css_getter(self, rewrite):
        _check(
            rewrite,
            'var c = $(el).css("backgroundColor");',
            'var c = getComputedStyle(el).getPropertyValue("background-color");',
        )

    def test_css_setter(self, rewrite):
        _check(rewrite, '$(el).css("color", "red");', 'el.style.setProperty("color", "red");')

    def test_css_object_is_kept(self, rewrite):
        source = '$(el).css({ color: "red" });'
        _check(rewrite, source, source)

    @pytest.mark.parametrize("value", ["+=10px", "-=1"])
    def test_css_relative_value_is_kept(self, rewrite, value):
        source = f"$(el).css('width', '{value}');"
        _check(rewrite, source, source)

    def test_window_width(self, rewrite):
        _check(
            rewrite,
            "var w = $(window).width();",
            "var w = document.documentElement.clientWidth;",
        )

    def test_window_height(self, rewrite):
        _check(
            rewrite,
            "resize($(window).height());",
            "resize(document.documentElement.clientHeight);",
        )

    @pytest.mark.parametrize(
        "source",
        [
            "var w = $(el).width();",
            "$(window).width(100);",
            "var window = frame; var w = $(window).width();",
        ],
    )
    def test_size_kept(self, rewrite, source):
        """Test that element sizes and setters keep jQuery's box model."""
        _check(rewrite, source, source)


class TestClasses:
    def test_add_class_splits_names(self, rewrite):
        _check(rewrite, '$(el).addClass("a b");', 'el.classList.add("a", "b");')

    def test_remove_class(self, rewrite):
        _check(rewrite, '$(el).removeClass("active");', 'el.classList.remove("active");')

    def test_toggle_class(self, rewrite):
        _check(rewrite, "$(el).toggleClass('open');", "el.classList.toggle('open');")

    def test_toggle_class_with_state_is_kept(self, rewrite):
        source = '$(el).toggleClass("open", flag);'
        _check(rewrite, source, source)

    def test_has_class(self, rewrite):
        _check(
            rewrite,
            'if ($(el).hasClass("x")) { go(); }',
            'if (el.classList.contains("x")) { go(); }',
        )

    def test_dynamic_class_name_is_kept(self, rewrite):
        source = "$(el).addClass(name);"
        _check(rewrite, source, source)


class TestAttributes:
    def test_attr_getter(self, rewrite):
        _check(rewrite, 'var v = $(el).attr("id");', 'var v = el.getAttribute("id");')

    def test_attr_setter(self, rewrite):
        _check(rewrite, '$(el).attr("title", "Hi");', 'el.setAttribute("title", "Hi");')

    def test_attr_setter_with_unknown_value_is_kept(self, rewrite):
        source = '$(el).attr("title", value);'
        _check(rewrite, source, source)

    def test_remove_attr(self, rewrite):
        _check(rewrite, '$(el).removeAttr("disabled");', 'el.removeAttribute("disabled");')

    def test_prop_setter(self, rewrite):
        _check(rewrite, '$(box).prop("checked", true);', "box.checked = true;")

    def test_prop_fix(self, rewrite):
        _check(rewrite, 'var c = $(el).prop("class");', "var c = el.className;")

    def test_val_getter(self, rewrite):
        _check(rewrite, "var v = $(input).val();", "var v = input.value;")

    def test_text_setter(self, rewrite):
        _check(rewrite, '$(el).text("hi");', 'el.textContent = "hi";')

    def test_html_setter_value_used_is_kept(self, rewrite):
        source = 'var x = $(el).html("<b>");'
        _check(rewrite, source, source)

    def test_val_with_callback_is_kept(self, rewrite):
        source = "$(el).val(function (i, v) { return v; });"
        _check(rewrite, source, source)

    def test_html_setter(self, rewrite):
        _check(rewrite, '$(el).html("<b>x</b>");', 'el.innerHTML = "<b>x</b>";')

    def test_val_setter_with_number(self, rewrite):
        _check(rewrite, "$(input).val(3);", "input.value = 3;")

    @pytest.mark.parametrize(
        "source",
        [
            "const child = document.createElement('b'); $(el).html(child);",
            "$(el).html(markup);",
            "$(el).html('<script>go()</script>');",
            "$(row).html('<td>1</td>');",
            "$(el).val(['a', 'b']);",
            "$(el).val(value);",
        ],
    )
    def test_setter_with_unsafe_value_is_kept(self, rewrite, source):
        _check(rewrite, source, source)


class TestEvents:
    def test_on(self, rewrite):
        _check(
            rewrite,
            '$(el).on("click", function () { go(); });',
            'el.addEventListener("click", function () { go(); });',
        )

    def test_on_with_return_false_is_kept(self, rewrite):
        source = '$(el).on("click", function () { return false; });'
        _check(rewrite, source, source)

    def test_delegated_on_is_kept(self, rewrite):
        source = '$(el).on("click", ".child", function () { go(); });'
        _check(rewrite, source, source)

    def test_namespaced_event_is_kept(self, rewrite):
        source = '$(el).on("click.ns", function () { go(); });'
        _check(rewrite, source, source)

    def test_off(self, rewrite):
        _check(
            rewrite,
            'function h() {}\n$(el).off("click", h);',
            'function h() {}\nel.removeEventListener("click", h);',
        )

    def test_trigger(self, rewrite):
        _check(
            rewrite,
            '$(el).trigger("change");',
            'el.dispatchEvent(new Event("change", { bubbles: true }));',
        )

    def test_document_ready(self, rewrite):
        _check(
            rewrite,
            "$(document).ready(function () { init(); });",
            'document.addEventListener("DOMContentLoaded", function () { init(); });',
        )

    def test_ready_with_declared_handler(self, rewrite):
        _check(
            rewrite,
            "function init() {}\n$(document).ready(init);",
            'function init() {}\ndocument.addEventListener("DOMContentLoaded", init);',
        )

    def test_shorthand_ready(self, rewrite):
        _check(
            rewrite,
            "$(function () { init(); });",
            'document.addEventListener("DOMContentLoaded", function () { init(); });',
        )

    def test_ready_handler_with_parameter_is_kept(self, rewrite):
        source = "$(function ($) { init(); });"
        _check(rewrite, source, source)


class TestTraversal:
    def test_parent_then_hide(self, rewrite):
        """Test that the re-wrapped parent is folded by the next pass."""
        _check(rewrite, "$(el).parent().hide();", 'el.parentElement.style.display = "none";')

    def test_next_then_add_class(self, rewrite):
        _check(
            rewrite,
            '$(el).next().addClass("x");',
            'el.nextElementSibling.classList.add("x");',
        )

    def test_children_stays_wrapped(self, rewrite):
        _check(rewrite, "var kids = $(el).children();", "var kids = $(el.children);")

    def test_closest(self, rewrite):
        _check(
            rewrite,
            '$(el).closest(".row").addClass("x");',
            'el.closest(".row").classList.add("x");',
        )

    def test_find_keeps_collection(self, rewrite):
        _check(
            rewrite,
            '$(el).find(".item").hide();',
            '$(el.querySelectorAll(".item")).hide();',
        )

    def test_find_with_combinator_is_kept(self, rewrite):
        source = '$(el).find("> li").hide();'
        _check(rewrite, source, source)

    def test_jquery_pseudo_is_kept(self, rewrite):
        source = '$(el).closest(":visible").hide();'
        _check(rewrite, source, source)

    def test_siblings(self, rewrite):
        _check(
            rewrite,
            "var others = $(el).siblings();",
            "var others = $(Array.from(el.parentNode?.children ?? [])"
            ".filter((sibling) => sibling !== el));",
        )

    def test_siblings_with_selector(self, rewrite):
        _check(
            rewrite,
            'function f() { $(this).siblings(".active").removeClass("active"); }',
            "function f() { $(Array.from(this.parentNode?.children ?? [])"
            '.filter((sibling) => (sibling !== this) && sibling.matches(".active")))'
            '.removeClass("active"); }',
        )

    @pytest.mark.parametrize(
        "source",
        [
            'var s = $(el).siblings("> li");',
            "var s = $(el).siblings(':visible');",
            "var s = $(getEl()).siblings();",
            "var s = $('#a').siblings();",
            "var s = $(sibling).siblings();",
        ],
    )
    def test_siblings_kept(self, rewrite, source):
        _check(rewrite, source, source)


class TestManipulation:
    def test_remove(self, rewrite):
        _check(rewrite, "$(el).remove();", "el.remove();")

    def test_empty(self, rewrite):
        _check(rewrite, "$(el).empty();", "el.replaceChildren();")

    def test_append_new_node(self, rewrite):
        _check(
            rewrite,
            '$(list).append(document.createElement("li"));',
            'list.append(document.createElement("li"));',
        )

    def test_append_html_is_kept(self, rewrite):
        source = '$(list).append("<li>");'
        _check(rewrite, source, source)


class TestStatics:
    def test_each_swaps_parameters(self, rewrite):
        _check(
            rewrite,
            "$.each([1, 2], function (i, v) { log(v); });",
            "[1, 2].forEach(function (v, i) { log(v); });",
        )

    def test_each_arrow_over_const_array(self, rewrite):
        _check(
            rewrite,
            "const items = [1, 2];\n$.each(items, (i, item) => { use(item); });",
            "const items = [1, 2];\nitems.forEach((item, i) => { use(item); });",
        )

    @pytest.mark.parametrize(
        "source",
        [
            "$.each(obj, function (k, v) { log(v); });",
            "$.each([1], function (i, v) { return false; });",
            "$.each([1], function (i, v) { this.x(); });",
            "$.each([1, , 2], function (i, v) { log(v); });",
            "$.each([1], function (i) { log(i); });",
            "var r = $.each([1], function (i, v) { log(v); });",
        ],
    )
    def test_each_kept(self, rewrite, source):
        _check(rewrite, source, source)

    def test_grep(self, rewrite):
        _check(
            rewrite,
            "var evens = $.grep([1, 2, 3], function (n) { return n % 2 === 0; });",
            "var evens = [1, 2, 3].filter(function (n) { return n % 2 === 0; });",
        )

    def test_trim(self, rewrite):
        _check(rewrite, 'var s = $.trim(" a ");', 'var s = " a ".trim();')

    def test_trim_unknown_value_is_kept(self, rewrite):
        source = "var s = $.trim(name);"
        _check(rewrite, source, source)

    def test_in_array_found(self, rewrite):
        _check(
            rewrite,
            'if ($.inArray("a", ["a", "b"]) !== -1) { go(); }',
            'if (["a", "b"].includes("a")) { go(); }',
        )

    def test_in_array_not_found(self, rewrite):
        _check(
            rewrite,
            'if ($.inArray("a", ["a", "b"]) === -1) { go(); }',
            'if (!["a", "b"].includes("a")) { go(); }',
        )

    def test_in_array_unknown_value_is_kept(self, rewrite):
        source = 'if ($.inArray(x, ["a"]) > -1) { go(); }'
        _check(rewrite, source, source)

    def test_map_with_arrow(self, rewrite):
        _check(rewrite, "var d = $.map([1, 2], (v) => v * 2);", "var d = [1, 2].map((v) => v * 2);")

    def test_map_with_block_callback(self, rewrite):
        _check(
            rewrite,
            "var s = $.map([1, 2], function (v, i) { return v + i; });",
            "var s = [1, 2].map(function (v, i) { return v + i; });",
        )

    @pytest.mark.parametrize(
        "source",
        [
            "var d = $.map(obj, (v) => v * 2);",
            "var d = $.map([1, 2], (v) => v > 1 ? v : null);",
            "var d = $.map([1, 2], (v) => [v, v]);",
            "var d = $.map([1, 2], function (v) { if (v) { return 1; } });",
            "var d = $.map([1, 2], function (v) { return lookup(v); });",
            "var d = $.map([1, 2], function () { return arguments.length; });",
        ],
    )
    def test_map_kept(self, rewrite, source):
        """Test that callbacks which may return null or an array keep $.map."""
        _check(rewrite, source, source)


class TestSelectors:
    def test_id_selector_with_focus(self, rewrite):
        _check(rewrite, '$("#save").focus();', 'document.getElementById("save").focus();')

    def test_id_selector_receiver(self, rewrite):
        _check(
            rewrite,
            '$("#save").hide();',
            'document.getElementById("save").style.display = "none";',
        )

    def test_id_selector_variable(self, rewrite):
        _check(
            rewrite,
            'function f() { var save = $("#save"); save.focus(); }',
            'function f() { var save = document.getElementById("save"); save.focus(); }',
        )

    def test_id_selector_module_level_dollar_name_is_kept(self, rewrite):
        source = 'var $save = $("#save"); $save.focus();'
        _check(rewrite, source, source)

    def test_class_selector_length(self, rewrite):
        _check(
            rewrite,
            'var n = $(".item").length;',
            'var n = document.querySelectorAll(".item").length;',
        )

    def test_unwrap_focus(self, rewrite):
        _check(rewrite, "$(el).focus();", "el.focus();")

    def test_unwrap_this(self, rewrite):
        _check(rewrite, "function f() { $(this).blur(); }", "function f() { this.blur(); }")

    def test_focus_with_handler_is_kept(self, rewrite):
        source = "$(el).focus(handler);"
        _check(rewrite, source, source)

    def test_focus_value_used_is_kept(self, rewrite):
        source = "var r = $(el).focus();"
        _check(rewrite, source, source)

    def test_each_over_selector(self, rewrite):
        _check(
            rewrite,
            '$(".item").each(function (i, el) { this.classList.add("x" + i); });',
            'document.querySelectorAll(".item")'
            '.forEach(function (el, i) { el.classList.add("x" + i); });',
        )

    def test_each_over_selector_with_arrow(self, rewrite):
        _check(
            rewrite,
            '$("li").each(() => { count++; });',
            'document.querySelectorAll("li").forEach(() => { count++; });',
        )

    @pytest.mark.parametrize(
        "source",
        [
            '$(".item").each(function () { this.remove(); });',
            '$("#main").each(function (i, el) { go(el); });',
            '$(".item").each(function (i, el) { if (el.hidden) { return false; } });',
            'var items = $(".item").each(function (i, el) { go(el); });',
            '$(".item:visible").each(function (i, el) { go(el); });',
            '$(".item").each(function (i, el) { el = null; this.remove(); });',
            '$(".item").each(function (i, el) { [1].forEach((el) => this.x(el)); });',
            '$(".item").each(function (i, el) { { let el = 1; this.x(el); } });',
            '$(".item").each(function (i) { go(i); });',
            '$("<li>").each(function (i, el) { go(el); });',
        ],
    )
    def test_each_over_selector_kept(self, rewrite, source):
        _check(rewrite, source, source)
