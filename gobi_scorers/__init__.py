"""
Scorer package export and registration.

Exposes `SCORER_REGISTRY` and imports available scorers for side-effect
registration into the registry.
"""

from .registry import SCORER_REGISTRY  # noqa: F401

# Import modules that register themselves in the registry on import.
from . import register  # noqa: F401  # side-effect: registers 'gobi_register'
from .register import ScoreReport, measure, measure_async  # noqa: F401
from .rules import DEFAULT_WEIGHTS, RANKA_RULES, RegisterWeights, RuleSet  # noqa: F401
