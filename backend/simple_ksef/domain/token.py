"""xsd:token string rules (the TZnakowy family of the KSeF schema).

The schema declares its text fields as restrictions of ``xsd:token``, e.g.::

    <xsd:simpleType name="TZnakowy">
      <xsd:restriction base="xsd:token">
        <xsd:minLength value="1"/>
        <xsd:maxLength value="256"/>
      </xsd:restriction>
    </xsd:simpleType>

``xsd:token`` is not ``xsd:string``: leading and trailing whitespace is
removed and internal whitespace runs collapse to a single space before the
length facets apply. A ``TokenRule`` is attached to a model field with
``Annotated[str, rule]``; the rule itself holds no per-instance state.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Optional

from simple_ksef.core.errors import TokenRuleConfigError


# Unicode whitespace minus the C0 information separators U+001C..U+001F,
# which str.isspace() accepts but the KSeF (.NET) side treats as text.
_WHITESPACE = re.compile(r"[^\S\x1c-\x1f]+")


def normalize_token(value: str) -> str:
    """Trim and collapse every whitespace run to one space."""
    return " ".join(part for part in _WHITESPACE.split(value) if part)


class ViolationKind(str, Enum):
    REQUIRED_FIELD_MISSING = "required_field_missing"
    TYPE_MISMATCH = "type_mismatch"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"


@dataclass(frozen=True)
class ValidationOutcome:
    kind: Optional[ViolationKind] = None
    min_length: int = 0
    max_length: int = 0

    @property
    def ok(self) -> bool:
        return self.kind is None

    def message(self, field: str) -> str:
        if self.kind == ViolationKind.REQUIRED_FIELD_MISSING:
            return f"{field} is required."
        if self.kind == ViolationKind.TYPE_MISMATCH:
            return f"{field} must be a string."
        if self.kind == ViolationKind.TOO_SHORT:
            return f"{field} must be at least {self.min_length} characters."
        if self.kind == ViolationKind.TOO_LONG:
            return f"{field} must be at most {self.max_length} characters."
        return f"{field} is valid."


@dataclass(frozen=True)
class TokenRule:
    min_length: int
    max_length: int

    def __post_init__(self) -> None:
        if self.min_length < 0:
            raise TokenRuleConfigError(
                f"TokenRule.min_length must be >= 0, got {self.min_length}."
            )
        if self.max_length < self.min_length:
            raise TokenRuleConfigError(
                f"TokenRule.max_length ({self.max_length}) must be >= "
                f"min_length ({self.min_length})."
            )

    def normalize(self, value: str) -> str:
        return normalize_token(value)

    def validate(self, value: Any) -> ValidationOutcome:
        """Check ``value`` against the length facets of its normalized form."""
        if value is None:
            if self.min_length == 0:
                return self._outcome()
            return self._outcome(ViolationKind.REQUIRED_FIELD_MISSING)

        if not isinstance(value, str):
            return self._outcome(ViolationKind.TYPE_MISMATCH)

        length = len(self.normalize(value))
        if length < self.min_length:
            return self._outcome(ViolationKind.TOO_SHORT)
        if length > self.max_length:
            return self._outcome(ViolationKind.TOO_LONG)
        return self._outcome()

    def _outcome(self, kind: Optional[ViolationKind] = None) -> ValidationOutcome:
        return ValidationOutcome(
            kind=kind, min_length=self.min_length, max_length=self.max_length
        )


# Presets observed in the KSeF schema
TZNAKOWY = TokenRule(min_length=1, max_length=256)
TZNAKOWY_2 = TokenRule(min_length=0, max_length=256)
TZNAKOWY_20 = TokenRule(min_length=1, max_length=20)
TZNAKOWY_50 = TokenRule(min_length=1, max_length=50)
TZNAKOWY_512 = TokenRule(min_length=1, max_length=512)

TZnakowy = Annotated[str, TZNAKOWY]
TZnakowy2 = Annotated[str, TZNAKOWY_2]
TZnakowy20 = Annotated[str, TZNAKOWY_20]
TZnakowy50 = Annotated[str, TZNAKOWY_50]
TZnakowy512 = Annotated[str, TZNAKOWY_512]
