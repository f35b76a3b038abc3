"""Tests for the tree-building state machine, driven by hand-written events."""

import pytest

from objectfetcher.core.builder import TreeBuilder
from objectfetcher.core.model import FetchConfig, Map, Scalar, Sequence, StructuralError


def _leaf(builder, tag, text=None, **attrs):
    builder.start_element(tag, attrs)
    if text is not None:
        builder.characters(text)
    builder.end_element(tag)


class TestBasicShapes:
    """Leaf scalars, maps and array promotion."""

    def test_single_root_without_wrapper(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.start_element("p", {})
        _leaf(builder, "item", "1")
        builder.end_element("p")

        result = builder.end_document()
        assert result == [Map({"item": Scalar("1")})]

    def test_repeated_siblings_become_sequence(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.start_element("p", {})
        _leaf(builder, "item", "1")
        _leaf(builder, "item", "2")
        _leaf(builder, "item", "3")
        builder.end_element("p")

        result = builder.end_document()
        assert [r.to_plain() for r in result] == [{"item": ["1", "2", "3"]}]
        assert isinstance(result[0]["item"], Sequence)

    def test_single_occurrence_is_not_a_sequence(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.start_element("p", {})
        _leaf(builder, "item", "1")
        builder.end_element("p")

        assert builder.end_document()[0]["item"] == Scalar("1")

    def test_empty_element_is_empty_map(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        _leaf(builder, "empty")
        assert builder.end_document() == [Map()]

    def test_promotion_keeps_document_order_with_interleaved_keys(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.start_element("r", {})
        _leaf(builder, "a", "1")
        _leaf(builder, "b", "x")
        _leaf(builder, "a", "2")
        builder.end_element("r")

        assert builder.end_document()[0].to_plain() == {"a": ["1", "2"], "b": "x"}

    def test_nested_maps(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.start_element("order", {})
        builder.start_element("customer", {})
        _leaf(builder, "name", "Ann")
        builder.start_element("address", {})
        _leaf(builder, "city", "Oslo")
        builder.end_element("address")
        builder.end_element("customer")
        builder.end_element("order")

        assert builder.end_document()[0].to_plain() == {
            "customer": {"name": "Ann", "address": {"city": "Oslo"}}
        }

    def test_repeated_complex_children(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.start_element("list", {})
        for n in ("1", "2"):
            builder.start_element("entry", {"n": n})
            _leaf(builder, "v", "x" + n)
            builder.end_element("entry")
        builder.end_element("list")

        assert builder.end_document()[0].to_plain() == {
            "entry": [{"n": "1", "v": "x1"}, {"n": "2", "v": "x2"}]
        }


class TestAttributesAndText:
    """Attribute installation and text merging."""

    def test_attributes_become_scalars(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        _leaf(builder, "point", x="1", y="2")
        assert builder.end_document() == [Map({"x": Scalar("1"), "y": Scalar("2")})]

    def test_text_next_to_attributes_goes_under_text_key(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.start_element("r", {})
        _leaf(builder, "price", "44.95", currency="USD")
        builder.end_element("r")

        assert builder.end_document()[0].to_plain() == {
            "price": {"currency": "USD", "#text": "44.95"}
        }

    def test_custom_text_key(self):
        builder = TreeBuilder(FetchConfig(text_key="value"))
        builder.start_document(False, False)
        _leaf(builder, "price", "5", currency="EUR")
        assert builder.end_document()[0].to_plain() == {"currency": "EUR", "value": "5"}

    def test_child_overrides_same_named_attribute(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.start_element("r", {"name": "from-attribute"})
        _leaf(builder, "name", "from-child")
        builder.end_element("r")

        assert builder.end_document()[0].to_plain() == {"name": "from-child"}

    def test_second_child_after_attribute_override_promotes(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.start_element("r", {"name": "attr"})
        _leaf(builder, "name", "one")
        _leaf(builder, "name", "two")
        builder.end_element("r")

        assert builder.end_document()[0].to_plain() == {"name": ["one", "two"]}

    def test_attributes_text_and_children_together(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.start_element("note", {"lang": "en"})
        builder.characters("hello ")
        _leaf(builder, "b", "big")
        builder.characters("world")
        builder.end_element("note")

        assert builder.end_document()[0].to_plain() == {
            "lang": "en", "b": "big", "#text": "hello world"
        }

    def test_fragmented_text_is_concatenated_in_order(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.start_element("t", {})
        for piece in ("Gam", "bar", "della, ", "Matt", "hew"):
            builder.characters(piece)
        builder.end_element("t")

        assert builder.end_document() == [Scalar("Gambardella, Matthew")]

    def test_whitespace_is_stripped_by_default(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.start_element("r", {})
        builder.characters("\n  ")
        _leaf(builder, "a", "  padded  ")
        builder.characters("\n")
        builder.end_element("r")

        assert builder.end_document()[0].to_plain() == {"a": "padded"}

    def test_whitespace_only_leaf_is_empty_map(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        _leaf(builder, "a", "   ")
        assert builder.end_document() == [Map()]

    def test_keep_whitespace(self):
        builder = TreeBuilder(FetchConfig(strip_whitespace=False))
        builder.start_document(False, False)
        builder.start_element("r", {})
        builder.characters("\n  ")
        _leaf(builder, "a", "  padded  ")
        builder.characters("\n")
        builder.end_element("r")

        # indentation between children is still not text
        assert builder.end_document()[0].to_plain() == {"a": "  padded  "}

    def test_rename(self):
        builder = TreeBuilder(FetchConfig(rename={"li": "items"}))
        builder.start_document(False, False)
        builder.start_element("ul", {})
        _leaf(builder, "li", "a")
        _leaf(builder, "li", "b")
        builder.end_element("ul")

        assert builder.end_document()[0].to_plain() == {"items": ["a", "b"]}


class TestWrapperAndSkipFirst:
    """Wrapper elision and skip-first."""

    def test_wrapper_children_become_records(self):
        builder = TreeBuilder()
        builder.start_document(True, False)
        builder.start_element("root", {})
        _leaf(builder, "a")
        _leaf(builder, "a")
        builder.end_element("root")

        result = builder.end_document()
        assert result == [Map(), Map()]

    def test_wrapper_records_keep_document_order(self):
        builder = TreeBuilder()
        builder.start_document(True, False)
        builder.start_element("root", {"version": "2"})
        _leaf(builder, "rec", "one")
        _leaf(builder, "other", id="x")
        _leaf(builder, "rec", "three")
        builder.end_element("root")

        assert [r.to_plain() for r in builder.end_document()] == ["one", {"id": "x"}, "three"]

    def test_wrapper_text_is_ignored_with_warning(self):
        builder = TreeBuilder()
        builder.start_document(True, False)
        builder.start_element("root", {})
        builder.characters("stray")
        _leaf(builder, "a", "1")
        with pytest.warns(UserWarning, match="wrapper"):
            builder.end_element("root")

        assert builder.end_document() == [Scalar("1")]

    def test_empty_wrapper(self):
        builder = TreeBuilder()
        builder.start_document(True, False)
        _leaf(builder, "root")
        assert builder.end_document() == []

    def test_skip_first_drops_exactly_one_record(self):
        builder = TreeBuilder()
        builder.start_document(True, True)
        builder.start_element("root", {})
        _leaf(builder, "header", count="2")
        _leaf(builder, "a", "1")
        _leaf(builder, "a", "2")
        builder.end_element("root")

        assert builder.end_document() == [Scalar("1"), Scalar("2")]

    def test_skip_first_on_empty_result_is_noop(self):
        builder = TreeBuilder()
        builder.start_document(True, True)
        _leaf(builder, "root")
        assert builder.end_document() == []

    def test_skip_first_on_single_record_gives_empty_result(self):
        builder = TreeBuilder()
        builder.start_document(False, True)
        _leaf(builder, "only", "x")
        assert builder.end_document() == []

    def test_configuration_defaults_come_from_config(self):
        builder = TreeBuilder(FetchConfig(has_wrapper_tag=True, skip_first=True))
        builder.start_document()
        builder.start_element("root", {})
        _leaf(builder, "a", "1")
        _leaf(builder, "a", "2")
        builder.end_element("root")

        assert builder.end_document() == [Scalar("2")]


class TestStructuralErrors:
    """Unbalanced or out-of-order events fail loudly."""

    def test_event_before_start_document(self):
        builder = TreeBuilder()
        with pytest.raises(StructuralError, match="before start of document"):
            builder.start_element("a", {})

    def test_close_without_open(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        with pytest.raises(StructuralError, match="without a matching open tag"):
            builder.end_element("a")

    def test_mismatched_close(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.start_element("a", {})
        with pytest.raises(StructuralError, match="does not close <a>"):
            builder.end_element("b")

    def test_unclosed_elements_at_end(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.start_element("a", {})
        builder.start_element("b", {})
        with pytest.raises(StructuralError, match="<a>, <b>"):
            builder.end_document()

    def test_second_root(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        _leaf(builder, "a")
        with pytest.raises(StructuralError, match="Second root"):
            builder.start_element("b", {})

    def test_text_outside_root(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.characters("\n")   # ignorable
        with pytest.raises(StructuralError, match="outside the root"):
            builder.characters("junk")

    def test_start_document_while_in_progress(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.start_element("a", {})
        with pytest.raises(StructuralError, match="already being built"):
            builder.start_document(False, False)


class TestLifecycle:
    """Depth tracking and reuse."""

    def test_depth_follows_nesting(self):
        builder = TreeBuilder()
        builder.start_document(True, False)
        assert builder.depth == 0
        builder.start_element("root", {})
        builder.start_element("a", {})
        assert builder.depth == 2
        builder.end_element("a")
        builder.end_element("root")
        assert builder.depth == 0

    def test_builder_is_reusable_after_end_document(self):
        builder = TreeBuilder()
        for _ in range(2):
            builder.start_document(False, False)
            _leaf(builder, "a", "1")
            assert builder.end_document() == [Scalar("1")]
        assert not builder.in_progress

    def test_reset_after_failure(self):
        builder = TreeBuilder()
        builder.start_document(False, False)
        builder.start_element("a", {})
        builder.reset()
        builder.start_document(False, False)
        _leaf(builder, "b", "ok")
        assert builder.end_document() == [Scalar("ok")]
