"""Unit tests for query-parameter access and binding.

WHY: Parameters are the first source bound into every request, and
several accessors have non-obvious rules (comma splitting, the "_all"
text wildcard, lenient booleans, char_filter routing).

RULES:
- bind_params never raises, whatever the input
- Without a body the request is a pure function of the parameters
"""

import pytest

from analyze_gateway.core.params import RequestParams, bind_params, split_by_comma
from analyze_gateway.core.request import NameSpec


class TestSplitByComma:

    def test_empty(self):
        assert split_by_comma("") == []

    def test_single(self):
        assert split_by_comma("lowercase") == ["lowercase"]

    def test_multiple(self):
        assert split_by_comma("a,b,c") == ["a", "b", "c"]

    def test_trailing_empties_dropped(self):
        assert split_by_comma("a,b,,") == ["a", "b"]

    def test_inner_empty_kept(self):
        assert split_by_comma("a,,b") == ["a", "", "b"]


class TestRequestParams:

    def test_from_mapping_with_lists(self):
        params = RequestParams({"filter": ["lowercase", "asciifolding"], "text": "hi"})
        assert params.get_all("filter") == ["lowercase", "asciifolding"]
        assert params.get_all("text") == ["hi"]

    def test_from_pairs(self):
        params = RequestParams([("text", "a"), ("text", "b")])
        assert params.get_all("text") == ["a", "b"]

    def test_param_last_value_wins(self):
        params = RequestParams([("analyzer", "standard"), ("analyzer", "simple")])
        assert params.param("analyzer") == "simple"

    def test_param_default(self):
        assert RequestParams().param("analyzer", "keyword") == "keyword"

    def test_string_array_concatenates_repeats(self):
        params = RequestParams([("filter", "lowercase,stop"), ("filter", "snowball")])
        assert params.param_as_string_array("filter") == ["lowercase", "stop", "snowball"]

    def test_string_array_default_when_absent(self):
        assert RequestParams().param_as_string_array("filter", ["x"]) == ["x"]

    @pytest.mark.parametrize("value", ["_all", "*", ""])
    def test_empty_if_all(self, value):
        params = RequestParams({"text": value})
        assert params.param_as_string_array_or_empty_if_all("text") == []

    def test_empty_if_all_absent(self):
        assert RequestParams().param_as_string_array_or_empty_if_all("text") == []

    def test_wildcard_only_special_when_alone(self):
        params = RequestParams({"text": "_all,foo"})
        assert params.param_as_string_array_or_empty_if_all("text") == ["_all", "foo"]

    @pytest.mark.parametrize("value", ["false", "0", "off", "no"])
    def test_boolean_false_values(self, value):
        assert RequestParams({"explain": value}).param_as_boolean("explain", True) is False

    @pytest.mark.parametrize("value", ["true", "1", "yes", ""])
    def test_boolean_true_values(self, value):
        assert RequestParams({"explain": value}).param_as_boolean("explain", False) is True

    def test_boolean_default(self):
        assert RequestParams().param_as_boolean("explain", False) is False


class TestBindParams:

    def test_empty_params(self, no_default_attributes):
        request = bind_params({})
        assert request.index is None
        assert request.text == []
        assert request.analyzer is None
        assert request.field is None
        assert request.tokenizer is None
        assert request.token_filters == []
        assert request.char_filters == []
        assert request.explain is False
        assert request.attributes == []

    def test_all_recognized_params(self):
        request = bind_params({
            "index": "books",
            "text": "hello,world",
            "analyzer": "standard",
            "field": "title",
            "tokenizer": "whitespace",
            "filter": "lowercase",
            "explain": "true",
            "attributes": "keyword,position",
        })
        assert request.index == "books"
        assert request.text == ["hello", "world"]
        assert request.analyzer == "standard"
        assert request.field == "title"
        assert request.tokenizer == NameSpec("whitespace")
        assert request.token_filters == [NameSpec("lowercase")]
        assert request.explain is True
        assert request.attributes == ["keyword", "position"]

    def test_path_index_wins_over_param(self):
        request = bind_params({"index": "param-index"}, index="path-index")
        assert request.index == "path-index"

    def test_char_filter_routed_to_token_filters(self):
        request = bind_params([("filter", "lowercase"), ("char_filter", "html_strip")])
        assert request.token_filters == [NameSpec("lowercase"), NameSpec("html_strip")]
        assert request.char_filters == []

    def test_text_wildcard_means_no_text(self):
        assert bind_params({"text": "_all"}).text == []

    def test_attributes_default_to_model_default(self, default_attributes):
        assert bind_params({}).attributes == default_attributes

    def test_unknown_params_ignored(self, no_default_attributes):
        request = bind_params({"pretty": "true", "tokenizer_settings": "{}"})
        assert request == bind_params({})

    def test_tokenizer_param_is_always_a_name(self):
        request = bind_params({"tokenizer": '{"type": "ngram"}'})
        assert request.tokenizer == NameSpec('{"type": "ngram"}')

    def test_accepts_request_params_instance(self):
        params = RequestParams({"analyzer": "simple"})
        assert bind_params(params).analyzer == "simple"

    def test_pure_function_of_params(self):
        source = [("text", "a,b"), ("filter", "lowercase"), ("explain", "1")]
        assert bind_params(source) == bind_params(list(source))
