"""Query-parameter access and binding into a fresh AnalyzeRequest.

WHY: Every analyze call starts from its URL query string. Parameters are
flat strings, possibly repeated, possibly comma-separated lists. This
module gives them typed accessors and binds the recognized ones into a
new AnalyzeRequest before any body is looked at.

HOW: RequestParams wraps a multi-valued mapping (or a list of key/value
pairs, as a query string decodes to). bind_params() reads each known
parameter through the accessors and sets the matching request field.

RULES:
- Binding never raises; unknown parameters are ignored
- param(): last supplied value wins
- Array accessors split every supplied value on commas, in order
- "_all" / "*" as the only text value means "no text provided"
- tokenizer from parameters is always a NameSpec (no inline settings)
- char_filter values are appended to the TOKEN filter list (known quirk,
  kept for compatibility with existing callers; body parsing separates them)
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from analyze_gateway.core.request import AnalyzeRequest, FieldSpec

_ALL_MARKERS = frozenset({"_all", "*"})
_FALSE_VALUES = frozenset({"false", "0", "off", "no"})

ParamSource = Union[
    Mapping[str, Union[str, Sequence[str]]],
    Iterable[Tuple[str, str]],
]


def split_by_comma(value: str) -> List[str]:
    """Split a comma-separated parameter value.

    Empty input yields []. Trailing empty pieces are dropped; inner empty
    pieces ("a,,b") are kept.
    """
    if not value:
        return []
    parts = value.split(",")
    while parts and parts[-1] == "":
        parts.pop()
    return parts


class RequestParams:
    """Read-only, multi-valued view over query parameters."""

    def __init__(self, source: Optional[ParamSource] = None) -> None:
        self._values: dict[str, List[str]] = {}
        if source is None:
            return
        if isinstance(source, Mapping):
            items: Iterable[Tuple[str, str]] = (
                (key, v)
                for key, value in source.items()
                for v in ([value] if isinstance(value, str) else value)
            )
        else:
            items = source
        for key, value in items:
            self._values.setdefault(key, []).append(value)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def keys(self) -> List[str]:
        return list(self._values)

    def get_all(self, key: str) -> List[str]:
        return list(self._values.get(key, []))

    def param(self, key: str, default: Optional[str] = None) -> Optional[str]:
        values = self._values.get(key)
        if not values:
            return default
        return values[-1]

    def param_as_string_array(
        self, key: str, default: Optional[List[str]] = None
    ) -> Optional[List[str]]:
        if key not in self._values:
            return default
        result: List[str] = []
        for value in self._values[key]:
            result.extend(split_by_comma(value))
        return result

    def param_as_string_array_or_empty_if_all(self, key: str) -> List[str]:
        values = self.param_as_string_array(key, [])
        if not values or (len(values) == 1 and values[0] in _ALL_MARKERS):
            return []
        return values

    def param_as_boolean(self, key: str, default: bool) -> bool:
        value = self.param(key)
        if value is None:
            return default
        return value not in _FALSE_VALUES


def bind_params(
    params: Union[RequestParams, ParamSource, None],
    index: Optional[str] = None,
) -> AnalyzeRequest:
    """Build a new AnalyzeRequest from query parameters alone.

    Args:
        params: Query parameters (RequestParams, mapping, or key/value pairs).
        index: Index name taken from the URL path; falls back to the
            ``index`` parameter when not given.

    Returns:
        A partially populated AnalyzeRequest. Never raises.
    """
    if not isinstance(params, RequestParams):
        params = RequestParams(params)

    request = AnalyzeRequest(index=index if index is not None else params.param("index"))
    request.set_text(*params.param_as_string_array_or_empty_if_all("text"))
    request.analyzer = params.param("analyzer")
    request.field = params.param("field")

    tokenizer = params.param("tokenizer")
    if tokenizer is not None:
        request.set_tokenizer(FieldSpec.from_name(tokenizer))

    for name in params.param_as_string_array("filter", []):
        request.add_token_filter(FieldSpec.from_name(name))
    for name in params.param_as_string_array("char_filter", []):
        request.add_token_filter(FieldSpec.from_name(name))

    request.explain = params.param_as_boolean("explain", False)
    request.set_attributes(
        *params.param_as_string_array("attributes", request.attributes)
    )
    return request
