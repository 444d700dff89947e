"""Errors raised while turning configuration and a tag into a release job."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PlanErrorKind = Literal[
    "invalid_tag",
    "invalid_config",
    "missing_credential",
]


@dataclass(frozen=True, slots=True)
class PlanError:
    kind: PlanErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
