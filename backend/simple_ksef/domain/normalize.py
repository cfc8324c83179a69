from __future__ import annotations

import dataclasses
import logging
from collections.abc import Collection, Mapping
from dataclasses import dataclass
from datetime import date, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Iterator, List, Set, Tuple, Union
from uuid import UUID

from pydantic import BaseModel

from simple_ksef.domain.fields import FieldSpec, field_table

log = logging.getLogger("simple_ksef.normalize")

Path = Tuple[Union[str, int], ...]

# Immutable leaves: never walked, never tracked in the visited set.
_TERMINAL = (str, bytes, bytearray, int, float, complex, Enum, Decimal, UUID, date, time, timedelta)


@dataclass(frozen=True)
class TokenSlot:
    """A rule-tagged field of one object in the graph."""

    owner: Any
    field: FieldSpec
    path: Path

    @property
    def value(self) -> Any:
        return getattr(self.owner, self.field.name, None)


def iter_token_fields(root: Any, *, writable_only: bool = False) -> Iterator[TokenSlot]:
    """Yield every rule-tagged field reachable from ``root``.

    Depth-first, in field declaration order. Objects are tracked by identity,
    so shared and cyclic references are visited once. The walk uses an
    explicit stack, so graph depth is bounded only by memory.

    With ``writable_only`` the walk does not enter frozen models or
    dataclasses, since their fields cannot be rewritten.
    """
    visited: Set[int] = set()
    stack: List[Any] = [(root, ())]

    while stack:
        item = stack.pop()
        if isinstance(item, TokenSlot):
            yield item
            continue

        obj, path = item
        if obj is None or isinstance(obj, _TERMINAL):
            continue
        if id(obj) in visited:
            continue
        visited.add(id(obj))

        stack.extend(reversed(_children(obj, path, writable_only)))


def _children(obj: Any, path: Path, writable_only: bool) -> List[Any]:
    if isinstance(obj, BaseModel) or (
        dataclasses.is_dataclass(obj) and not isinstance(obj, type)
    ):
        table = field_table(type(obj))
        if writable_only and not table.writable:
            return []
        return _fields_of(obj, path, table.fields or ())

    if isinstance(obj, Mapping):
        return [(value, path + (key,)) for key, value in obj.items()]

    if isinstance(obj, Collection):
        return [(element, path + (i,)) for i, element in enumerate(obj)]

    attrs = getattr(obj, "__dict__", None)
    if isinstance(attrs, dict) and not isinstance(obj, type):
        table = field_table(type(obj))
        names = [name for name in list(attrs) if not name.startswith("_")]
        # tagged attributes that were never assigned still need validating
        names.extend(name for name in table.rules if name not in attrs)
        return _fields_of(obj, path, [table.spec_for(name) for name in names])

    return []


def _fields_of(obj: Any, path: Path, specs: Iterable[FieldSpec]) -> List[Any]:
    out: List[Any] = []
    for spec in specs:
        field_path = path + (spec.wire_name,)
        if spec.rule is not None:
            out.append(TokenSlot(owner=obj, field=spec, path=field_path))
        else:
            out.append((getattr(obj, spec.name, None), field_path))
    return out


def normalize_graph(root: Any) -> None:
    """Rewrite every rule-tagged string field reachable from ``root`` in place.

    ``None`` values are left alone; whether they are allowed is decided by
    validation. Fields whose declared type is not ``str`` are skipped.
    """
    if root is None:
        return

    changed = 0
    for slot in iter_token_fields(root, writable_only=True):
        if slot.field.misconfigured:
            continue
        current = slot.value
        if not isinstance(current, str):
            continue
        normalized = slot.field.rule.normalize(current)
        if normalized != current:
            setattr(slot.owner, slot.field.name, normalized)
            changed += 1

    if changed:
        log.debug("normalized %d token field(s) on %s", changed, type(root).__name__)
