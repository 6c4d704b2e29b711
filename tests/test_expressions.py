"""Tests for interpolation parsing, reference extraction and rendering."""

from terraplan.utils.expressions import (
    Reference,
    extract_references,
    extract_references_from_expression,
    find_interpolations,
    iter_strings,
    render_string,
    render_value,
    validate_interpolation_syntax,
)


class TestFindInterpolations:
    def test_multiple(self):
        assert find_interpolations("${aws_vpc.main.id}/${var.suffix}") == [
            "aws_vpc.main.id",
            "var.suffix",
        ]

    def test_none(self):
        assert find_interpolations("www.example.com") == []

    def test_brace_inside_quoted_key(self):
        assert find_interpolations('${b.y["a}b"].id}-x') == ['b.y["a}b"].id']

    def test_escaped_interpolation_is_literal(self):
        assert find_interpolations("$${a.b.id}") == []
        assert find_interpolations("$${a.b.id}-${c.d.id}") == ["c.d.id"]

    def test_iter_strings_nested(self):
        value = {"a": ["x", {"b": "y"}], "c": 3, "d": None}
        assert list(iter_strings(value)) == ["x", "y"]


class TestExtractReferences:
    def test_attribute_traversal_ignored(self):
        assert extract_references_from_expression("aws_vpc.main.id") == [
            Reference(type="aws_vpc", name="main")
        ]

    def test_indexed_reference(self):
        refs = extract_references_from_expression("aws_instance.web[2].private_ip")
        assert refs == [Reference(type="aws_instance", name="web", key=2)]

    def test_keyed_reference(self):
        refs = extract_references_from_expression('aws_subnet.a["dev"].id')
        assert refs == [Reference(type="aws_subnet", name="a", key="dev")]
        assert str(refs[0]) == 'aws_subnet.a["dev"]'

    def test_reserved_roots_skipped(self):
        expr = "var.region == each.key ? local.x : count.index + data.aws_ami.id"
        assert extract_references_from_expression(expr) == []

    def test_string_literals_not_references(self):
        assert extract_references_from_expression('"aws_vpc.main"') == []

    def test_multiple_in_one_expression(self):
        refs = extract_references_from_expression(
            "concat(aws_subnet.a.ids, aws_subnet.b.ids)"
        )
        assert [r.address for r in refs] == ["aws_subnet.a", "aws_subnet.b"]

    def test_plain_strings_ignored(self):
        assert extract_references({"host": "www.example.com", "n": 1}) == []

    def test_deduplicated_in_first_seen_order(self):
        value = {
            "a": "${aws_vpc.main.id}",
            "b": ["${aws_subnet.x.id}", "${aws_vpc.main.cidr_block}"],
        }
        assert extract_references(value) == [
            Reference(type="aws_vpc", name="main"),
            Reference(type="aws_subnet", name="x"),
        ]

    def test_brace_inside_quoted_key(self):
        assert extract_references({"a": '${b.y["a}b"].id}'}) == [
            Reference(type="b", name="y", key="a}b")
        ]

    def test_escaped_interpolation_has_no_references(self):
        assert extract_references("$${aws_vpc.main.id}") == []


class TestValidateInterpolationSyntax:
    def test_valid(self):
        assert validate_interpolation_syntax("${a.b.c}-${var.x}") is None

    def test_unterminated(self):
        problem = validate_interpolation_syntax("prefix-${aws_vpc.main.id")
        assert problem == "unterminated interpolation at offset 7"

    def test_brace_inside_quoted_key(self):
        assert validate_interpolation_syntax('${b.y["a}b"].id}') is None

    def test_escaped_opening_ignored(self):
        assert validate_interpolation_syntax("cost: $${") is None


class TestRender:
    def test_count_index_inside_text(self):
        assert (
            render_string("10.0.${count.index}.0/24", {"count.index": 2})
            == "10.0.2.0/24"
        )

    def test_whole_string_keeps_type(self):
        assert render_string("${count.index}", {"count.index": 3}) == 3

    def test_index_substituted_in_reference(self):
        assert (
            render_string("${aws_subnet.a[count.index].id}", {"count.index": 1})
            == "${aws_subnet.a[1].id}"
        )

    def test_each_key_in_reference(self):
        rendered = render_string(
            "${aws_subnet.a[each.key].id}", {"each.key": "dev", "each.value": {}}
        )
        assert rendered == '${aws_subnet.a["dev"].id}'

    def test_each_key_with_brace_stays_referenced(self):
        rendered = render_string(
            "${aws_subnet.a[each.key].id}", {"each.key": "a}b", "each.value": 1}
        )
        assert rendered == '${aws_subnet.a["a}b"].id}'
        assert extract_references(rendered) == [
            Reference(type="aws_subnet", name="a", key="a}b")
        ]

    def test_escaped_interpolation_not_rendered(self):
        assert render_string("$${count.index}", {"count.index": 1}) == "$${count.index}"

    def test_each_value_composite(self):
        value = {"cidr": "10.0.0.0/16"}
        rendered = render_string("${each.value}", {"each.key": "dev", "each.value": value})
        assert rendered == value
        assert rendered is not value

    def test_unbound_left_alone(self):
        assert render_string("${count.index}", {}) == "${count.index}"

    def test_render_value_nested(self):
        value = {"name": "web-${count.index}", "tags": ["${count.index}"], "n": 1}
        assert render_value(value, {"count.index": 0}) == {
            "name": "web-0",
            "tags": [0],
            "n": 1,
        }

    def test_render_value_does_not_mutate(self):
        value = {"name": "web-${count.index}"}
        render_value(value, {"count.index": 0})
        assert value == {"name": "web-${count.index}"}
