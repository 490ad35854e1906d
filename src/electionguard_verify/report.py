#!/usr/bin/env python
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .errors import FailureKind, VerificationError


@dataclass(frozen=True)
class Failure:
    """
    One failed check: the smallest entity it concerns, the kind of
    violation and a human-readable reason.
    """

    entity: str
    kind: FailureKind
    message: str = ""

    @classmethod
    def from_error(cls, entity: str, error: VerificationError) -> "Failure":
        return cls(entity, error.kind, str(error))


@dataclass
class VerificationReport:
    """
    The outcome of verifying a record. Only failed checks are listed,
    in the order the checks ran.
    """

    failures: List[Failure] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.failures

    def failures_for(self, entity: str) -> List[Failure]:
        return [failure for failure in self.failures if failure.entity == entity]

    def kinds(self) -> List[FailureKind]:
        return [failure.kind for failure in self.failures]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.is_valid,
            "failures": [
                {
                    "entity": failure.entity,
                    "kind": failure.kind.value,
                    "message": failure.message,
                }
                for failure in self.failures
            ],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def to_text(self) -> str:
        if self.is_valid:
            return "Valid"
        lines = [f"Invalid: {len(self.failures)} failed check(s)"]
        for failure in self.failures:
            line = f"  {failure.entity}: {failure.kind.value}"
            if failure.message:
                line += f" ({failure.message})"
            lines.append(line)
        return "\n".join(lines)
