from __future__ import annotations

from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from simple_ksef.domain.validate import FieldViolation


class DomainError(ValueError):
    """Invalid request in a domain sense (bad field values, unknown ids, etc.)."""


class TokenValidationError(DomainError):
    """One or more token fields failed validation after normalization."""

    def __init__(self, violations: List["FieldViolation"]):
        self.violations = list(violations)
        super().__init__(f"{len(self.violations)} token field(s) failed validation.")


class TokenRuleConfigError(TypeError):
    """A token rule is attached to a field that cannot hold a string."""
