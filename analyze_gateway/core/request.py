"""AnalyzeRequest model and the FieldSpec name-or-settings union.

WHY: Query parameters and the request body both describe the same
analysis chain. Both are bound into one mutable AnalyzeRequest that is
then handed, as a whole, to the analysis engine. The tokenizer and every
filter entry can be either a registered name or an inline settings
object, so they are carried as a closed two-variant union instead of a
loose "str or dict".

HOW: Two frozen dataclasses form the FieldSpec union:
  NameSpec     — a bare registered name ("lowercase")
  SettingsSpec — an inline definition ({"type": "ngram", "min_gram": 2})
AnalyzeRequest is a plain dataclass with whole-collection setters and
append helpers for the filter lists.

RULES:
- Exactly one FieldSpec variant exists per entry; nothing else is accepted
- Whole-collection setters replace the previous value, never merge
- index is fixed at construction
- attributes default to config.DEFAULT_ATTRIBUTES (may be non-empty)
- No semantic validation here (field vs analyzer is the engine's call)
"""

from __future__ import annotations

import copy
import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from analyze_gateway import config


class FieldSpec:
    """Base of the closed NameSpec / SettingsSpec union.

    Only the two subclasses below exist. Build instances through
    from_name() / from_settings() and branch on is_name / is_settings
    (or isinstance over both variants).
    """

    __slots__ = ()

    @property
    def is_name(self) -> bool:
        return isinstance(self, NameSpec)

    @property
    def is_settings(self) -> bool:
        return isinstance(self, SettingsSpec)

    @staticmethod
    def from_name(name: str) -> NameSpec:
        if not isinstance(name, str):
            raise TypeError("name must be a string, got {}".format(type(name).__name__))
        return NameSpec(name)

    @staticmethod
    def from_settings(settings: Mapping[str, Any]) -> SettingsSpec:
        if not isinstance(settings, Mapping):
            raise TypeError(
                "settings must be a mapping, got {}".format(type(settings).__name__)
            )
        return SettingsSpec(dict(settings))


@dataclass(frozen=True)
class NameSpec(FieldSpec):
    """A tokenizer or filter referenced by its registered name."""

    name: str


def _freeze(value: Any) -> Any:
    """Hashable stand-in for nested settings (dicts and lists included)."""
    if isinstance(value, Mapping):
        return frozenset((key, _freeze(item)) for key, item in value.items())
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


@dataclass(frozen=True)
class SettingsSpec(FieldSpec):
    """An anonymous tokenizer or filter defined inline by its settings.

    The mapping is deep-copied on construction so the caller's dict can
    be reused or mutated without changing the request. Equality compares
    the settings, and hashing uses a frozen copy of them.
    """

    settings: Dict[str, Any]

    def __hash__(self) -> int:
        return hash(_freeze(self.settings))

    def __post_init__(self) -> None:
        object.__setattr__(self, "settings", copy.deepcopy(dict(self.settings)))


def to_field_spec(value: Union[str, Mapping[str, Any], FieldSpec]) -> FieldSpec:
    """Coerce a name, a settings mapping, or an existing spec into a FieldSpec.

    RULES:
    - str → NameSpec, Mapping → SettingsSpec, FieldSpec → unchanged
    - Any other shape raises TypeError
    """
    if isinstance(value, (NameSpec, SettingsSpec)):
        return value
    if isinstance(value, str):
        return FieldSpec.from_name(value)
    if isinstance(value, Mapping):
        return FieldSpec.from_settings(value)
    raise TypeError(
        "expected a name or a settings mapping, got {}".format(type(value).__name__)
    )


def field_spec_to_wire(spec: FieldSpec) -> Union[str, Dict[str, Any]]:
    """Render a FieldSpec the way the _analyze body spells it."""
    if isinstance(spec, NameSpec):
        return spec.name
    if isinstance(spec, SettingsSpec):
        return copy.deepcopy(spec.settings)
    raise TypeError("unknown field spec variant: {!r}".format(spec))


def _default_attributes() -> List[str]:
    return list(config.DEFAULT_ATTRIBUTES)


@dataclass
class AnalyzeRequest:
    """One analyze call, filled in by the parameter binder and body parser.

    WHY: The engine needs a single object describing what to analyze and
    how: which texts, which analyzer or field, or an ad-hoc chain of
    char filters → tokenizer → token filters.

    HOW: Created once per incoming call by bind_params(), then optionally
    overwritten field by field by build_from_content().

    RULES:
    - text: ordered; replaced wholesale by set_text()
    - token_filters / char_filters: ordered; order is pipeline order
    - tokenizer: None or one FieldSpec
    - explain defaults to False
    - attributes default to the configured default set
    """

    index: Optional[str] = None
    text: List[str] = dataclasses.field(default_factory=list)
    analyzer: Optional[str] = None
    field: Optional[str] = None
    tokenizer: Optional[FieldSpec] = None
    token_filters: List[FieldSpec] = dataclasses.field(default_factory=list)
    char_filters: List[FieldSpec] = dataclasses.field(default_factory=list)
    explain: bool = False
    attributes: List[str] = dataclasses.field(default_factory=_default_attributes)

    def set_text(self, *texts: str) -> None:
        self.text = list(texts)

    def set_tokenizer(self, value: Union[str, Mapping[str, Any], FieldSpec]) -> None:
        self.tokenizer = to_field_spec(value)

    def add_token_filter(self, value: Union[str, Mapping[str, Any], FieldSpec]) -> None:
        self.token_filters.append(to_field_spec(value))

    def add_char_filter(self, value: Union[str, Mapping[str, Any], FieldSpec]) -> None:
        self.char_filters.append(to_field_spec(value))

    def set_token_filters(self, *values: Union[str, Mapping[str, Any], FieldSpec]) -> None:
        self.token_filters = [to_field_spec(v) for v in values]

    def set_char_filters(self, *values: Union[str, Mapping[str, Any], FieldSpec]) -> None:
        self.char_filters = [to_field_spec(v) for v in values]

    def set_attributes(self, *attributes: str) -> None:
        self.attributes = list(attributes)

    def to_dict(self) -> Dict[str, Any]:
        """Render the request as an ``_analyze`` JSON body.

        RULES:
        - index is not part of the body (it goes in the URL path)
        - None-valued scalars and empty filter lists are omitted
        - text, explain and attributes are always present
        """
        body: Dict[str, Any] = {"text": list(self.text)}
        if self.analyzer is not None:
            body["analyzer"] = self.analyzer
        if self.field is not None:
            body["field"] = self.field
        if self.tokenizer is not None:
            body["tokenizer"] = field_spec_to_wire(self.tokenizer)
        if self.token_filters:
            body["filter"] = [field_spec_to_wire(s) for s in self.token_filters]
        if self.char_filters:
            body["char_filter"] = [field_spec_to_wire(s) for s in self.char_filters]
        body["explain"] = self.explain
        body["attributes"] = list(self.attributes)
        return body
