from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class PasswordRequirement:
    text: str
    met: bool


@dataclass(frozen=True)
class PasswordStrength:
    score: int
    label: str
    requirements: tuple[PasswordRequirement, ...]

    @property
    def met_count(self) -> int:
        return sum(1 for requirement in self.requirements if requirement.met)

    @property
    def is_strong(self) -> bool:
        return self.met_count == len(self.requirements)


_REQUIREMENTS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r".{8,}", re.DOTALL), "At least 8 characters"),
    (re.compile(r"[A-Z]"), "One uppercase letter"),
    (re.compile(r"[a-z]"), "One lowercase letter"),
    (re.compile(r"\d"), "One number"),
    (re.compile(r"[!@#$%^&*(),.?\":{}|<>]"), "One special character"),
)

# (max requirements met, score, label), checked in order.
_LEVELS: tuple[tuple[int, int, str], ...] = (
    (0, 0, "Very Weak"),
    (2, 25, "Weak"),
    (3, 50, "Fair"),
    (4, 75, "Good"),
)


def evaluate_password(password: str) -> PasswordStrength:
    requirements = tuple(
        PasswordRequirement(text=text, met=bool(pattern.search(password or "")))
        for pattern, text in _REQUIREMENTS
    )
    met = sum(1 for requirement in requirements if requirement.met)
    for ceiling, score, label in _LEVELS:
        if met <= ceiling:
            return PasswordStrength(score=score, label=label, requirements=requirements)
    return PasswordStrength(score=100, label="Strong", requirements=requirements)
