"""Response screening for text returned by AI providers.

Provider output is untrusted: a page can carry hidden instructions aimed at
the agent reading the response. screen_response() scores text against a
table of suspicious patterns and reports whether it stays under the
configured risk threshold.

Patterns include:
- Instruction overrides ("ignore previous instructions")
- Role/system prompt spoofing
- Invisible or bidirectional-control characters
- Requests for credentials or secrets
- Terminal escape sequences
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from webpuppet_mcp.automation.interfaces import ScreeningResult

DEFAULT_RISK_THRESHOLD = 0.7

# Pattern table: name -> (regex, weight). Weights add up and are capped at 1.0.
SCREENING_PATTERNS: dict[str, tuple[re.Pattern[str], float]] = {
    "instruction_override": (
        re.compile(
            r"\b(ignore|disregard|forget)\b.{0,30}\b(previous|prior|above|earlier)\b"
            r".{0,20}\b(instructions?|prompts?|rules?)\b",
            re.IGNORECASE | re.DOTALL,
        ),
        0.5,
    ),
    "role_spoofing": (
        re.compile(
            r"(^|\n)\s*(system|assistant)\s*:|<\|?(system|im_start)\|?>",
            re.IGNORECASE,
        ),
        0.4,
    ),
    "credential_request": (
        re.compile(
            r"\b(send|enter|provide|paste|reveal)\b.{0,30}\b"
            r"(password|api[_ -]?key|secret|token|2fa code|one[- ]time code)\b",
            re.IGNORECASE | re.DOTALL,
        ),
        0.4,
    ),
    "invisible_characters": (
        re.compile(r"[\u200b-\u200f\u202a-\u202e\u2060-\u2064\ufeff]"),
        0.3,
    ),
    "terminal_escape": (
        re.compile(r"\x1b\[[0-9;?]*[A-Za-z]|\x1b\][^\x07]*\x07"),
        0.3,
    ),
    "tool_invocation": (
        re.compile(
            r"\b(call|invoke|run|execute)\b.{0,20}\b(tool|function|webpuppet_\w+)\b",
            re.IGNORECASE | re.DOTALL,
        ),
        0.2,
    ),
}


def compile_block_patterns(patterns: Iterable[str]) -> tuple[re.Pattern[str], ...]:
    """Compile user-supplied block patterns, case-insensitively.

    Raises:
        ValueError: If a pattern is not a valid regular expression.
    """
    compiled = []
    for raw in patterns:
        try:
            compiled.append(re.compile(raw, re.IGNORECASE))
        except re.error as e:
            raise ValueError(f"Invalid block pattern {raw!r}: {e}") from e
    return tuple(compiled)


@dataclass(frozen=True)
class ScreeningConfig:
    """Screening settings shared by every prompt.

    Attributes:
        enabled: When False every response passes with a zero score.
        risk_threshold: Responses scoring at or above this fail screening.
        block_patterns: Extra regexes; each match adds 0.5 to the score.
            They are compiled on construction, so a bad pattern fails here
            rather than on the first screened response.
    """

    enabled: bool = True
    risk_threshold: float = DEFAULT_RISK_THRESHOLD
    block_patterns: tuple[str, ...] = field(default_factory=tuple)
    compiled_patterns: tuple[re.Pattern[str], ...] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "compiled_patterns", compile_block_patterns(self.block_patterns)
        )


def screen_response(text: str, config: ScreeningConfig) -> ScreeningResult:
    """Score a response and decide whether it passes.

    Args:
        text: The provider response.
        config: Active screening configuration.

    Returns:
        ScreeningResult with the capped score and the names of the matched
        patterns.
    """
    if not config.enabled:
        return ScreeningResult(passed=True, risk_score=0.0)

    score = 0.0
    issues: list[str] = []

    for name, (pattern, weight) in SCREENING_PATTERNS.items():
        if pattern.search(text):
            score += weight
            issues.append(name)

    for pattern in config.compiled_patterns:
        if pattern.search(text):
            score += 0.5
            issues.append(f"block_pattern:{pattern.pattern}")

    score = min(score, 1.0)
    return ScreeningResult(
        passed=score < config.risk_threshold,
        risk_score=score,
        issues=tuple(issues),
    )
