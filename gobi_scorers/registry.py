"""
Global scorer registry.

Exposes `SCORER_REGISTRY`: a mapping from a string key to a callable of the
form `(text_a: str, text_b: str) -> float` that returns a score in the range
[0.0, 1.0]. For register scorers `text_a` is the prompt and `text_b` the
response being judged.
"""

from typing import Callable, Dict

SCORER_REGISTRY: Dict[str, Callable[[str, str], float]] = {}
