"""
Batch register scoring over pandas DataFrames.

Summary:
- `score_frame` scores one or more response columns row by row with
  `measure` and appends score/diagnostic columns.
- `summarize_scores` reports per-column statistics against an acceptance
  threshold chosen by the caller.

Missing cells (NaN/None) are scored as empty responses.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import pandas as pd

from .register import measure
from .rules import DEFAULT_WEIGHTS, RANKA_RULES, RegisterWeights, RuleSet

logger = logging.getLogger(__name__)


def _norm(x) -> str:
    if x is None or pd.isna(x):
        return ""
    return str(x).strip()


def _check_columns(df: pd.DataFrame, cols: Sequence[str]) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise KeyError(f"Columns not found in frame: {missing}")


def score_frame(
    df: pd.DataFrame,
    response_cols: Sequence[str],
    input_col: Optional[str] = None,
    rules: RuleSet = RANKA_RULES,
    weights: RegisterWeights = DEFAULT_WEIGHTS,
) -> pd.DataFrame:
    """Return a copy of `df` with register scores for each response column.

    For each column `c` adds `score_<c>`, `endings_<c>` ("matched/total"),
    `phrases_<c>` and `slang_<c>`. With two or more response columns also
    adds `best_response_col` and `best_score` (ties go to the first column).
    """
    cols: List[str] = list(response_cols)
    _check_columns(df, cols + ([input_col] if input_col else []))

    df_out = df.copy()
    prompts = df_out[input_col] if input_col else pd.Series([""] * len(df_out), index=df_out.index)

    for c in cols:
        reports = [measure(_norm(p), _norm(r), rules=rules, weights=weights) for p, r in zip(prompts, df_out[c])]
        df_out[f"score_{c}"] = [r.score for r in reports]
        df_out[f"endings_{c}"] = [f"{r.appropriate_endings}/{r.total_sentences}" for r in reports]
        df_out[f"phrases_{c}"] = [r.characteristic_phrase_count for r in reports]
        df_out[f"slang_{c}"] = [", ".join(r.details.inappropriate_phrases_found) for r in reports]
        logger.debug("scored column %r over %d rows", c, len(reports))

    if len(cols) > 1:
        score_cols = [f"score_{c}" for c in cols]
        scores = df_out[score_cols]
        best = scores.idxmax(axis=1) if len(df_out) else []
        # idxmax returns the first column on ties.
        df_out["best_response_col"] = [cols[score_cols.index(sc)] for sc in best]
        df_out["best_score"] = scores.max(axis=1)
    return df_out


def summarize_scores(
    df_scored: pd.DataFrame, response_cols: Sequence[str], threshold: float = 0.5
) -> pd.DataFrame:
    """Per response column: rows, mean/min/max score, passed count and pass rate."""
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be within [0, 1], got {threshold}")
    score_cols = [f"score_{c}" for c in response_cols]
    _check_columns(df_scored, score_cols)

    rows = []
    for c, sc in zip(response_cols, score_cols):
        s = pd.to_numeric(df_scored[sc], errors="coerce")
        n = int(s.notna().sum())
        passed = int((s >= threshold).sum())
        rows.append({
            "column": c,
            "rows": n,
            "mean": round(float(s.mean()), 2) if n else None,
            "min": float(s.min()) if n else None,
            "max": float(s.max()) if n else None,
            "passed": passed,
            "pass_rate": round(passed / n, 2) if n else 0.0,
        })
    return pd.DataFrame(rows)
