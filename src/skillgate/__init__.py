"""SkillGate.

Adaptive skill rating, challenge selection and admission control for
collaborative coding projects.
"""

from skillgate.engine import SkillEngine

__version__ = "0.1.0"
__all__ = [
    "SkillEngine",
    "__version__",
]
