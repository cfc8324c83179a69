"""Per-type lookup of token-tagged fields.

A type's field table is resolved once and cached, so the request-time walk
never inspects annotations again. Types that the walk cannot describe
(slotted objects, builtins) simply have no fields.

Frozen models and dataclasses still get a full table, flagged as not
writable: validation and registration read them, normalization skips them.
"""

from __future__ import annotations

import dataclasses
import typing
from dataclasses import dataclass
from functools import lru_cache
from types import NoneType, UnionType
from typing import Any, Dict, Iterable, Optional, Set, Tuple, Union

from pydantic import BaseModel

from simple_ksef.core.errors import TokenRuleConfigError
from simple_ksef.domain.token import TokenRule

TOKEN_RULE_METADATA_KEY = "token_rule"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    rule: Optional[TokenRule] = None
    # rule attached to a field whose declared type is not str
    misconfigured: bool = False
    # wire name; differs from ``name`` for aliased pydantic fields
    alias: Optional[str] = None

    @property
    def wire_name(self) -> str:
        return self.alias or self.name


@dataclass(frozen=True)
class FieldTable:
    # None means "whatever the instance carries in __dict__"
    fields: Optional[Tuple[FieldSpec, ...]]
    rules: Dict[str, FieldSpec]
    writable: bool = True

    def spec_for(self, name: str) -> FieldSpec:
        return self.rules.get(name) or FieldSpec(name=name)

    @property
    def misconfigured(self) -> Tuple[FieldSpec, ...]:
        return tuple(f for f in self.rules.values() if f.misconfigured)


@lru_cache(maxsize=None)
def field_table(cls: type) -> FieldTable:
    if isinstance(cls, type) and issubclass(cls, BaseModel):
        return _model_table(cls)
    if dataclasses.is_dataclass(cls):
        return _dataclass_table(cls)
    return _plain_table(cls)


def _model_table(cls: type) -> FieldTable:
    specs = []
    for name, info in cls.model_fields.items():
        rule = _rule_in(info.metadata) or _rule_in_annotation(info.annotation)
        alias = info.alias or _generated_alias(cls, name)
        specs.append(_spec(name, rule, info.annotation, alias=alias))
    return _table(specs, writable=not cls.model_config.get("frozen"))


def _generated_alias(cls: type, name: str) -> Optional[str]:
    # alias_generator is applied lazily when the schema build was deferred
    generator = cls.model_config.get("alias_generator")
    return generator(name) if callable(generator) else None


def _dataclass_table(cls: type) -> FieldTable:
    hints = _type_hints(cls)
    specs = []
    for f in dataclasses.fields(cls):
        annotation = hints.get(f.name, f.type)
        rule = f.metadata.get(TOKEN_RULE_METADATA_KEY) or _rule_in_annotation(annotation)
        specs.append(_spec(f.name, rule, annotation))
    return _table(specs, writable=not cls.__dataclass_params__.frozen)


def _plain_table(cls: type) -> FieldTable:
    specs = []
    for name, annotation in _type_hints(cls).items():
        rule = _rule_in_annotation(annotation)
        if rule is not None:
            specs.append(_spec(name, rule, annotation))
    return FieldTable(fields=None, rules={s.name: s for s in specs})


def _table(specs: Iterable[FieldSpec], writable: bool) -> FieldTable:
    specs = tuple(specs)
    return FieldTable(
        fields=specs,
        rules={s.name: s for s in specs if s.rule is not None},
        writable=writable,
    )


def _spec(
    name: str, rule: Optional[TokenRule], annotation: Any, alias: Optional[str] = None
) -> FieldSpec:
    if rule is None:
        return FieldSpec(name=name, alias=alias)
    return FieldSpec(
        name=name,
        rule=rule,
        misconfigured=not _is_str_annotation(annotation),
        alias=alias,
    )


def _type_hints(cls: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        # unresolvable forward references: fall back to the raw annotations
        hints: Dict[str, Any] = {}
        for klass in reversed(getattr(cls, "__mro__", (cls,))):
            hints.update(getattr(klass, "__annotations__", {}) or {})
        return hints


def _rule_in(metadata: Iterable[Any]) -> Optional[TokenRule]:
    for item in metadata:
        if isinstance(item, TokenRule):
            return item
    return None


def _rule_in_annotation(annotation: Any) -> Optional[TokenRule]:
    """Find a rule in ``Annotated[...]``, also when wrapped in ``Optional``."""
    if typing.get_origin(annotation) is typing.Annotated:
        return _rule_in(getattr(annotation, "__metadata__", ()))
    if _is_union(annotation):
        for arg in typing.get_args(annotation):
            rule = _rule_in_annotation(arg)
            if rule is not None:
                return rule
    return None


def _strip(annotation: Any) -> Any:
    if typing.get_origin(annotation) is typing.Annotated:
        return _strip(typing.get_args(annotation)[0])
    return annotation


def _is_union(annotation: Any) -> bool:
    return typing.get_origin(annotation) in (Union, UnionType)


def _is_str_annotation(annotation: Any) -> bool:
    annotation = _strip(annotation)
    if _is_union(annotation):
        args = [_strip(a) for a in typing.get_args(annotation) if _strip(a) is not NoneType]
        return len(args) == 1 and _is_str_annotation(args[0])
    return isinstance(annotation, type) and issubclass(annotation, str)


def _nested_types(annotation: Any) -> Iterable[type]:
    annotation = _strip(annotation)
    if isinstance(annotation, type):
        yield annotation
    for arg in typing.get_args(annotation):
        yield from _nested_types(arg)


def register_models(*classes: type) -> None:
    """Resolve field tables for ``classes`` and everything they nest.

    Raises ``TokenRuleConfigError`` listing every rule attached to a field
    that cannot hold a string.
    """
    seen: Set[type] = set()
    stack = list(classes)
    problems = []

    while stack:
        cls = stack.pop()
        if cls in seen:
            continue
        seen.add(cls)

        if isinstance(cls, type) and issubclass(cls, BaseModel):
            annotations = [info.annotation for info in cls.model_fields.values()]
        elif dataclasses.is_dataclass(cls):
            hints = _type_hints(cls)
            annotations = [hints.get(f.name, f.type) for f in dataclasses.fields(cls)]
        else:
            continue

        table = field_table(cls)
        problems.extend(f"{cls.__qualname__}.{f.name}" for f in table.misconfigured)

        for annotation in annotations:
            for nested in _nested_types(annotation):
                if nested not in seen:
                    stack.append(nested)

    if problems:
        raise TokenRuleConfigError(
            "Token rules can only be attached to str fields: " + ", ".join(sorted(problems))
        )
