"""
Rule and weight tables for the persona register scorer.

Summary:
- `RuleSet` bundles the four lexical categories the scorer checks: sentence
  endings, characteristic phrases, pronoun forms and disallowed slang.
- `RegisterWeights` is the named weight table used to combine them.
- `RANKA_RULES` / `DEFAULT_WEIGHTS` describe the default persona: an
  archaic, refined feminine speech style (…ですわ, 私（わたくし）, あなた様).

Precedence:
- Ending rules are tried in declaration order and the first match wins.
- Pronoun patterns are applied most-specific first; a span claimed by an
  earlier pattern is not visible to later ones.

Both tables are frozen and shared by every call.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class EndingRule:
    pattern: re.Pattern
    canonical: str

    @classmethod
    def suffix(cls, literal: str) -> "EndingRule":
        return cls(re.compile(re.escape(literal) + r"\Z"), literal)


@dataclass(frozen=True)
class RuleSet:
    endings: Tuple[EndingRule, ...]
    phrases: Tuple[str, ...]
    first_person: Tuple[re.Pattern, ...]
    second_person: Tuple[re.Pattern, ...]
    disallowed: Tuple[re.Pattern, ...]

    def shadowed_endings(self) -> List[Tuple[str, str]]:
        """Return `(earlier, later)` canonical pairs where `later` can never match.

        A later rule is shadowed when an earlier rule's suffix is itself a
        suffix of it; every sentence the later rule accepts is claimed first.
        """
        pairs = []
        for i, early in enumerate(self.endings):
            for late in self.endings[i + 1:]:
                if late.canonical.endswith(early.canonical):
                    pairs.append((early.canonical, late.canonical))
        return pairs


@dataclass(frozen=True)
class RegisterWeights:
    endings: float = 0.4
    phrases: float = 0.3
    phrase_cap: int = 5
    first_person: float = 0.1
    second_person: float = 0.1
    clean: float = 0.1

    def __post_init__(self):
        if self.phrase_cap < 1:
            raise ValueError(f"phrase_cap must be >= 1, got {self.phrase_cap}")

    @property
    def total(self) -> float:
        return self.endings + self.phrases + self.first_person + self.second_person + self.clean


def _compile(patterns) -> Tuple[re.Pattern, ...]:
    return tuple(re.compile(p) for p in patterns)


RANKA_RULES = RuleSet(
    endings=tuple(
        EndingRule.suffix(s)
        for s in ("ですわ", "ましょう", "ですこと", "でしょう", "ございます", "ませ", "わね", "ますわ")
    ),
    phrases=(
        "あら、まぁ",
        "ふふっ",
        "これはこれは",
        "面白きことを仰る",
        "というものですわ",
        "便利な道具",
        "千里眼のような",
        "蜘蛛の巣のような",
        "瓦版",
        "井戸端会議",
        "御贔屓",
    ),
    # Combined form first: 私（わたくし） is a single pronoun, not 私 + わたくし.
    first_person=_compile([r"私[（(]わたくし[)）]", r"わたくし", r"私"]),
    second_person=_compile([r"あなた様", r"あなた", r"お客様"]),
    disallowed=_compile([
        r"ヤバ[いっ]?",
        r"ウケる",
        r"マジ",
        r"っす",
        r"だよね",
        r"じゃん",
        r"〜的な",
        r"ワロタ",
        r"草",
        r"www",
    ]),
)

DEFAULT_WEIGHTS = RegisterWeights()
