from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from simple_ksef.core.errors import TokenValidationError
from simple_ksef.domain.normalize import Path, iter_token_fields
from simple_ksef.domain.token import ValidationOutcome, ViolationKind


@dataclass(frozen=True)
class FieldViolation:
    path: Path
    kind: ViolationKind
    outcome: ValidationOutcome

    @property
    def field(self) -> str:
        names = [p for p in self.path if isinstance(p, str)]
        return names[-1] if names else "value"

    @property
    def message(self) -> str:
        return self.outcome.message(self.field)

    def as_error(self) -> Dict[str, Any]:
        """Shape of one entry in FastAPI's validation error payload."""
        return {
            "type": self.kind.value,
            "loc": ["body", *self.path],
            "msg": self.message,
            "ctx": {
                "min_length": self.outcome.min_length,
                "max_length": self.outcome.max_length,
            },
        }


def collect_violations(root: Any) -> List[FieldViolation]:
    violations: List[FieldViolation] = []
    if root is None:
        return violations

    for slot in iter_token_fields(root):
        outcome = slot.field.rule.validate(slot.value)
        if outcome.kind is not None:
            violations.append(
                FieldViolation(path=slot.path, kind=outcome.kind, outcome=outcome)
            )
    return violations


def validate_request(req: Any) -> None:
    # Runs after normalize_graph; every failing field is reported at once.
    violations = collect_violations(req)
    if violations:
        raise TokenValidationError(violations)
