"""
Interpolation methods for term structures and fixing series.

Provides:
- LinearInterpolator: Linear interpolation on the stored values
- LogLinearInterpolator: Linear interpolation on log(values), i.e.
  piecewise constant forward rates when the values are discount factors

All interpolators take year fractions (or day ordinals) as x-coordinates.
Outside the fitted range they extrapolate flat unless `extrapolate=True`,
in which case the boundary segment is continued.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
import numpy as np


class Interpolator(ABC):
    """Abstract base class for one-dimensional interpolation."""

    def __init__(self, extrapolate: bool = False):
        self.extrapolate = extrapolate
        self.times: Optional[np.ndarray] = None
        self.values: Optional[np.ndarray] = None

    def fit(self, times: Sequence[float], values: Sequence[float]) -> "Interpolator":
        """
        Fit the interpolator to data points.

        Args:
            times: x-coordinates (sorted internally)
            values: y-coordinates

        Returns:
            self, so that fit can be chained
        """
        if len(times) != len(values):
            raise ValueError("Times and values must have same length")
        if len(times) < 2:
            raise ValueError("Need at least 2 points for interpolation")

        idx = np.argsort(np.asarray(times, dtype=np.float64), kind="stable")
        self.times = np.asarray(times, dtype=np.float64)[idx]
        self.values = self._transform(np.asarray(values, dtype=np.float64)[idx])
        return self

    def _transform(self, values: np.ndarray) -> np.ndarray:
        return values

    def _inverse(self, value: float) -> float:
        return value

    def _segment(self, t: float) -> int:
        idx = int(np.searchsorted(self.times, t, side='right')) - 1
        return max(0, min(idx, len(self.times) - 2))

    def interpolate(self, t: float) -> float:
        """
        Interpolate at a single point.

        Args:
            t: x-coordinate

        Returns:
            Interpolated value
        """
        if self.times is None:
            raise RuntimeError("Interpolator not fitted")

        if not self.extrapolate:
            if t <= self.times[0]:
                return self._inverse(float(self.values[0]))
            if t >= self.times[-1]:
                return self._inverse(float(self.values[-1]))

        idx = self._segment(t)
        t0, t1 = self.times[idx], self.times[idx + 1]
        v0, v1 = self.values[idx], self.values[idx + 1]

        w = (t - t0) / (t1 - t0) if t1 != t0 else 0.0
        return self._inverse(float(v0 + w * (v1 - v0)))

    def __call__(self, t: float) -> float:
        """Convenience method to call interpolate."""
        return self.interpolate(t)

    @property
    @abstractmethod
    def method(self) -> str:
        """Name accepted by create_interpolator."""
        pass


class LinearInterpolator(Interpolator):
    """Linear interpolation between knot points."""

    @property
    def method(self) -> str:
        return "linear"


class LogLinearInterpolator(Interpolator):
    """
    Log-linear interpolation.

    Interpolates linearly in log space; on discount factors this
    corresponds to piecewise constant forward rates.
    """

    @property
    def method(self) -> str:
        return "log_linear"

    def _transform(self, values: np.ndarray) -> np.ndarray:
        if np.any(values <= 0):
            raise ValueError("Log-linear interpolation needs positive values")
        return np.log(values)

    def _inverse(self, value: float) -> float:
        return float(np.exp(value))


def create_interpolator(method: str, extrapolate: bool = False) -> Interpolator:
    """
    Factory function to create an interpolator by name.

    Args:
        method: One of "linear", "log_linear"
        extrapolate: Continue boundary segments instead of flat extrapolation

    Returns:
        Interpolator instance
    """
    key = method.lower().replace("-", "_").replace(" ", "_")

    if key in ("linear", "lin"):
        return LinearInterpolator(extrapolate)
    elif key in ("log_linear", "loglinear"):
        return LogLinearInterpolator(extrapolate)
    else:
        raise ValueError(f"Unknown interpolation method: {method}")


__all__ = [
    "Interpolator",
    "LinearInterpolator",
    "LogLinearInterpolator",
    "create_interpolator",
]
