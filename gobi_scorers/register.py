"""
Persona speech-register scorer.

Summary:
- Judges whether a response "sounds like" the persona by matching a fixed
  rule table: sentence endings, characteristic phrases, pronoun forms and a
  blocklist of modern slang. Purely lexical; no parsing or semantics.

Stages:
1. Split the response into sentences on 。！？ (no mark -> one sentence).
2. Classify each sentence ending; the first matching rule wins.
3. Scan the whole text for phrases, pronouns and slang.
4. Combine the counts with `RegisterWeights`.

Score range:
- Returns a float in [0.0, 1.0] rounded to 2 decimals. Empty response -> 0.1
  (only the no-slang bonus applies).

The prompt text is accepted for symmetry with other scorers but is not read.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .registry import SCORER_REGISTRY
from .rules import DEFAULT_WEIGHTS, RANKA_RULES, EndingRule, RegisterWeights, RuleSet

logger = logging.getLogger(__name__)

_SENTENCE_END_RE = re.compile(r"[。！？]")
_MASK = "\0"


@dataclass(frozen=True)
class PronounUsage:
    first_person: int = 0
    second_person: int = 0


# Reports compare by value but are not hashable: the ending histogram is a dict.
@dataclass(eq=True, frozen=True, unsafe_hash=False)
class ScoreDetails:
    ending_patterns: Dict[str, int] = field(default_factory=dict)
    characteristic_phrases_used: Tuple[str, ...] = ()
    inappropriate_phrases_found: Tuple[str, ...] = ()

    __hash__ = None  # type: ignore[assignment]


@dataclass(eq=True, frozen=True, unsafe_hash=False)
class ScoreReport:
    score: float
    total_sentences: int
    appropriate_endings: int
    characteristic_phrase_count: int
    pronoun_usage: PronounUsage
    inappropriate_count: int
    details: ScoreDetails

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self) -> dict:
        out = asdict(self)
        out["details"]["characteristic_phrases_used"] = list(self.details.characteristic_phrases_used)
        out["details"]["inappropriate_phrases_found"] = list(self.details.inappropriate_phrases_found)
        return out


def segment_sentences(text: str) -> List[str]:
    """Split `text` on 。！？ into trimmed, non-empty sentences.

    Text without any terminal mark is one sentence when non-blank; blank
    text yields no sentences.
    """
    stripped = (text or "").strip()
    if not stripped:
        return []
    if not _SENTENCE_END_RE.search(stripped):
        return [stripped]
    return [s.strip() for s in _SENTENCE_END_RE.split(stripped) if s.strip()]


def classify_endings(
    sentences: Iterable[str], endings: Sequence[EndingRule]
) -> Tuple[int, Dict[str, int]]:
    """Count sentences that end with a known form; return `(count, histogram)`.

    Only the first matching rule is credited for a sentence.
    """
    matched = 0
    histogram: Dict[str, int] = {}
    for sentence in sentences:
        for rule in endings:
            if rule.pattern.search(sentence):
                matched += 1
                histogram[rule.canonical] = histogram.get(rule.canonical, 0) + 1
                break
    return matched, histogram


def scan_phrases(text: str, phrases: Iterable[str]) -> List[str]:
    # Distinct coverage: repeats of the same phrase count once.
    return [p for p in phrases if p in text]


def count_with_precedence(text: str, patterns: Sequence[re.Pattern]) -> int:
    """Count matches of `patterns`, most specific first, without double counting.

    Each pattern's matches are masked out before the next pattern runs, so
    "私（わたくし）" counts once and is not seen again as 私 or わたくし.
    """
    remaining = text
    total = 0
    for pattern in patterns:
        remaining, n = pattern.subn(lambda m: _MASK * len(m.group(0)), remaining)
        total += n
    return total


def scan_disallowed(text: str, patterns: Iterable[re.Pattern]) -> Tuple[int, List[str]]:
    count = 0
    found: Dict[str, None] = {}
    for pattern in patterns:
        for m in pattern.finditer(text):
            count += 1
            found.setdefault(m.group(0), None)
    return count, list(found)


def _round_score(raw: float) -> float:
    # Half-up on the shortest repr of the float, so 0.125 -> 0.13.
    return float(Decimal(repr(raw)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def aggregate(
    total_sentences: int,
    appropriate_endings: int,
    phrase_count: int,
    pronouns: PronounUsage,
    inappropriate_count: int,
    weights: RegisterWeights = DEFAULT_WEIGHTS,
) -> float:
    score = 0.0
    if total_sentences > 0:
        score += (appropriate_endings / total_sentences) * weights.endings
    if phrase_count > 0:
        score += min(phrase_count / weights.phrase_cap, 1.0) * weights.phrases
    if pronouns.first_person > 0:
        score += weights.first_person
    if pronouns.second_person > 0:
        score += weights.second_person
    if inappropriate_count == 0:
        score += weights.clean
    return _round_score(max(0.0, min(1.0, score)))


def measure(
    input_text: Optional[str],
    output_text: Optional[str],
    rules: RuleSet = RANKA_RULES,
    weights: RegisterWeights = DEFAULT_WEIGHTS,
) -> ScoreReport:
    """Score `output_text` against the persona register described by `rules`.

    Method: segment into sentences and credit the first matching ending per
    sentence; over the full text, count distinct characteristic phrases,
    pronoun forms (most specific first) and every slang match; combine with
    `weights`.

    Expected I/O:
    - Input: the prompt (ignored) and the response; `None` is treated as "".
    - Output: a `ScoreReport` whose `score` is in [0.0, 1.0].

    Never raises for string input.
    """
    text = output_text or ""
    sentences = segment_sentences(text)
    appropriate, histogram = classify_endings(sentences, rules.endings)
    phrases_used = scan_phrases(text, rules.phrases)
    pronouns = PronounUsage(
        first_person=count_with_precedence(text, rules.first_person),
        second_person=count_with_precedence(text, rules.second_person),
    )
    slang_count, slang_found = scan_disallowed(text, rules.disallowed)

    score = aggregate(
        len(sentences), appropriate, len(phrases_used), pronouns, slang_count, weights
    )
    logger.debug(
        "register score=%.2f sentences=%d endings=%d phrases=%d pronouns=%s slang=%d",
        score, len(sentences), appropriate, len(phrases_used), pronouns, slang_count,
    )
    return ScoreReport(
        score=score,
        total_sentences=len(sentences),
        appropriate_endings=appropriate,
        characteristic_phrase_count=len(phrases_used),
        pronoun_usage=pronouns,
        inappropriate_count=slang_count,
        details=ScoreDetails(
            ending_patterns=histogram,
            characteristic_phrases_used=tuple(phrases_used),
            inappropriate_phrases_found=tuple(slang_found),
        ),
    )


async def measure_async(
    input_text: Optional[str],
    output_text: Optional[str],
    rules: RuleSet = RANKA_RULES,
    weights: RegisterWeights = DEFAULT_WEIGHTS,
) -> ScoreReport:
    """Awaitable form of `measure` for async evaluation harnesses."""
    return measure(input_text, output_text, rules=rules, weights=weights)


def score_gobi_register(text_a: str, text_b: str) -> float:
    return measure(text_a, text_b).score


# Register in global registry
SCORER_REGISTRY["gobi_register"] = score_gobi_register
