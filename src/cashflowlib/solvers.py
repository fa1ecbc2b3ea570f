"""
Bracketing root solver shared by the builders and the analytic visitors.

All solves in the package go through brent_root, which wraps
scipy.optimize.brentq and converts its failures into EvaluationError:
- ValueError: f(lower) and f(upper) have the same sign
- RuntimeError: no convergence within maxiter

Domain errors raised by the objective itself propagate unchanged.
"""

from typing import Callable
import logging

from scipy.optimize import brentq

from .errors import CashflowLibError, EvaluationError

logger = logging.getLogger(__name__)

TOLERANCE = 1e-6
MAX_ITERATIONS = 100


def brent_root(
    objective: Callable[[float], float],
    lower: float,
    upper: float,
    xtol: float = TOLERANCE,
    maxiter: int = MAX_ITERATIONS,
    what: str = "root"
) -> float:
    """
    Find x in [lower, upper] with objective(x) = 0.

    Args:
        objective: Continuous function of one variable
        lower: Left end of the bracket
        upper: Right end of the bracket
        xtol: Absolute tolerance on x
        maxiter: Iteration cap
        what: Label used in error messages and logs

    Returns:
        The root

    Raises:
        EvaluationError: If the bracket does not contain a sign change or
            the solver does not converge
    """
    try:
        root, result = brentq(objective, lower, upper, xtol=xtol, maxiter=maxiter,
                              full_output=True, disp=True)
    except CashflowLibError:
        raise
    except (ValueError, RuntimeError) as exc:
        raise EvaluationError(f"Solver failed for {what} on [{lower}, {upper}]: {exc}") from exc

    logger.debug("Solved %s = %s in %s iterations", what, root, result.iterations)
    return float(root)


__all__ = [
    "TOLERANCE",
    "MAX_ITERATIONS",
    "brent_root",
]
