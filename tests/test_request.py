"""Unit tests for AnalyzeRequest and the FieldSpec union.

RULES:
- FieldSpec variants are constructed only via from_name / from_settings
- to_dict() output is what the remote engine sends over the wire
"""

import pytest

from analyze_gateway.core.request import (
    AnalyzeRequest,
    FieldSpec,
    NameSpec,
    SettingsSpec,
    field_spec_to_wire,
    to_field_spec,
)


class TestFieldSpec:
    """Exactly one of name / settings is populated."""

    def test_from_name(self):
        spec = FieldSpec.from_name("lowercase")
        assert spec == NameSpec("lowercase")
        assert spec.is_name
        assert not spec.is_settings

    def test_from_settings(self):
        spec = FieldSpec.from_settings({"type": "ngram", "min_gram": 2})
        assert isinstance(spec, SettingsSpec)
        assert spec.is_settings
        assert not spec.is_name
        assert spec.settings == {"type": "ngram", "min_gram": 2}

    def test_settings_are_copied(self):
        source = {"type": "stop", "stopwords": ["a"]}
        spec = FieldSpec.from_settings(source)
        source["stopwords"].append("the")
        source["type"] = "changed"
        assert spec.settings == {"type": "stop", "stopwords": ["a"]}

    def test_from_name_rejects_non_string(self):
        with pytest.raises(TypeError):
            FieldSpec.from_name({"type": "standard"})

    def test_from_settings_rejects_non_mapping(self):
        with pytest.raises(TypeError):
            FieldSpec.from_settings(["standard"])

    def test_to_field_spec_coerces(self):
        assert to_field_spec("standard") == NameSpec("standard")
        assert to_field_spec({"type": "keyword"}) == SettingsSpec({"type": "keyword"})
        existing = NameSpec("x")
        assert to_field_spec(existing) is existing

    def test_to_field_spec_rejects_other_shapes(self):
        with pytest.raises(TypeError):
            to_field_spec(42)

    def test_wire_form(self):
        assert field_spec_to_wire(NameSpec("lowercase")) == "lowercase"
        assert field_spec_to_wire(SettingsSpec({"type": "stop"})) == {"type": "stop"}

    def test_both_variants_are_hashable(self):
        settings = {"type": "stop", "stopwords": ["a", "the"], "nested": {"x": 1}}
        specs = {
            NameSpec("lowercase"),
            NameSpec("lowercase"),
            SettingsSpec(settings),
            SettingsSpec(dict(settings)),
        }
        assert len(specs) == 2

    def test_equal_settings_hash_equal(self):
        left = SettingsSpec({"type": "ngram", "min_gram": 2, "chars": ["letter"]})
        right = SettingsSpec({"chars": ["letter"], "min_gram": 2.0, "type": "ngram"})
        assert left == right
        assert hash(left) == hash(right)


class TestAnalyzeRequestDefaults:

    def test_defaults(self, no_default_attributes):
        request = AnalyzeRequest()
        assert request.index is None
        assert request.text == []
        assert request.analyzer is None
        assert request.field is None
        assert request.tokenizer is None
        assert request.token_filters == []
        assert request.char_filters == []
        assert request.explain is False
        assert request.attributes == []

    def test_default_attributes_come_from_config(self, default_attributes):
        assert AnalyzeRequest().attributes == default_attributes

    def test_default_attributes_are_not_shared(self, default_attributes):
        first = AnalyzeRequest()
        first.attributes.append("position")
        assert AnalyzeRequest().attributes == default_attributes


class TestAnalyzeRequestSetters:

    def test_set_text_replaces(self):
        request = AnalyzeRequest()
        request.set_text("a", "b")
        request.set_text("c")
        assert request.text == ["c"]

    def test_set_attributes_replaces(self, default_attributes):
        request = AnalyzeRequest()
        request.set_attributes("position")
        assert request.attributes == ["position"]

    def test_filters_keep_insertion_order(self):
        request = AnalyzeRequest()
        request.add_token_filter("lowercase")
        request.add_token_filter({"type": "stop"})
        request.add_char_filter("html_strip")
        assert request.token_filters == [NameSpec("lowercase"), SettingsSpec({"type": "stop"})]
        assert request.char_filters == [NameSpec("html_strip")]

    def test_set_filters_replace(self):
        request = AnalyzeRequest()
        request.add_token_filter("lowercase")
        request.add_char_filter("html_strip")
        request.set_token_filters("stop", {"type": "asciifolding"})
        request.set_char_filters()
        assert request.token_filters == [NameSpec("stop"), SettingsSpec({"type": "asciifolding"})]
        assert request.char_filters == []

    def test_set_tokenizer_accepts_name_or_settings(self):
        request = AnalyzeRequest()
        request.set_tokenizer("whitespace")
        assert request.tokenizer == NameSpec("whitespace")
        request.set_tokenizer({"type": "pattern", "pattern": ","})
        assert request.tokenizer == SettingsSpec({"type": "pattern", "pattern": ","})


class TestToDict:

    def test_minimal(self, no_default_attributes):
        request = AnalyzeRequest(index="books")
        assert request.to_dict() == {"text": [], "explain": False, "attributes": []}

    def test_full(self, no_default_attributes):
        request = AnalyzeRequest(index="books")
        request.set_text("Hello")
        request.analyzer = "standard"
        request.field = "title"
        request.set_tokenizer({"type": "ngram", "min_gram": 2})
        request.add_token_filter("lowercase")
        request.add_char_filter({"type": "html_strip"})
        request.explain = True
        request.set_attributes("keyword")

        assert request.to_dict() == {
            "text": ["Hello"],
            "analyzer": "standard",
            "field": "title",
            "tokenizer": {"type": "ngram", "min_gram": 2},
            "filter": ["lowercase"],
            "char_filter": [{"type": "html_strip"}],
            "explain": True,
            "attributes": ["keyword"],
        }
        assert "index" not in request.to_dict()
