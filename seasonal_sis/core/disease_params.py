"""
Seasonal Transmissibility and Disease Parameters
================================================
Periodic, piecewise-constant transmission rate with its closed-form
integral and integral inverse (time rescaling for inhomogeneous events)
"""

import math
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from .exceptions import ConfigurationError, DegenerateRateError, PreconditionViolation


def _check_finite(**values: float):
    for name, value in values.items():
        if not math.isfinite(value):
            raise ConfigurationError(f"{name} must be finite, got {value!r}")


@dataclass(frozen=True)
class SeasonalTransmissibility:
    """
    Periodic transmissibility with period t2:

        lambda(t) = base_rate               for (t mod t2) in [0, t1)
        lambda(t) = base_rate + rate_boost  for (t mod t2) in [t1, t2)

    The one-period integral is cached at construction as
    Lt1 = base_rate * t1 and Lt2 = Lt1 + (base_rate + rate_boost) * (t2 - t1).
    """
    t1: float
    t2: float
    base_rate: float
    rate_boost: float
    Lt1: float = field(init=False, repr=False)
    Lt2: float = field(init=False, repr=False)

    def __post_init__(self):
        _check_finite(t1=self.t1, t2=self.t2, base_rate=self.base_rate, rate_boost=self.rate_boost)
        if self.t1 < 0:
            raise ConfigurationError(f"t1 must be non-negative, got {self.t1}")
        if self.t2 <= self.t1:
            raise ConfigurationError(f"t2 must be greater than t1, got t1={self.t1}, t2={self.t2}")
        if self.base_rate < 0:
            raise ConfigurationError(f"base_rate must be non-negative, got {self.base_rate}")
        if self.boosted_rate < 0:
            raise ConfigurationError(
                f"base_rate + rate_boost must be non-negative, got {self.boosted_rate}"
            )

        Lt1 = self._integral_low(self.t1)
        object.__setattr__(self, 'Lt1', Lt1)
        object.__setattr__(self, 'Lt2', Lt1 + self._integral_high(self.t2 - self.t1))

    @property
    def period(self) -> float:
        return self.t2

    @property
    def boosted_rate(self) -> float:
        """Rate during the [t1, t2) phase"""
        return self.base_rate + self.rate_boost

    # Piecewise pieces: rate, integral and inverse integral of each phase

    def _integral_low(self, dt: float) -> float:
        return self.base_rate * dt

    def _integral_high(self, dt: float) -> float:
        return self.boosted_rate * dt

    def _inverse_low(self, dL: float) -> float:
        return dL / self.base_rate

    def _inverse_high(self, dL: float) -> float:
        if self.boosted_rate == 0:
            return 0.0
        return dL / self.boosted_rate

    def evaluate(self, t: float) -> float:
        """Rate at time t (phase boundary t1 belongs to the boosted phase)"""
        _, dt = divmod(t, self.t2)
        if dt < self.t1:
            return self.base_rate
        return self.boosted_rate

    def __call__(self, t: float) -> float:
        return self.evaluate(t)

    def evaluate_integral(self, t: float) -> float:
        """Integral of the rate over [0, t]"""
        if t < 0:
            raise PreconditionViolation(f"Integral is defined for t >= 0, got {t}")
        period, dt = divmod(t, self.t2)
        if dt < self.t1:
            return period * self.Lt2 + self._integral_low(dt)
        return period * self.Lt2 + self.Lt1 + self._integral_high(dt - self.t1)

    def evaluate_integral_inverse(self, L: float) -> float:
        """
        Time t with evaluate_integral(t) == L

        Exact inverse wherever the integral is strictly increasing. On a
        zero-rate plateau the end of the plateau is returned, the first
        instant at which intensity accumulates again.
        """
        if L < 0:
            raise PreconditionViolation(f"Integral inverse is defined for L >= 0, got {L}")
        if self.Lt2 == 0:
            raise DegenerateRateError("Integral inverse undefined: transmissibility is identically zero")
        period, dL = divmod(L, self.Lt2)
        if dL < self.Lt1:
            return period * self.t2 + self._inverse_low(dL)
        return period * self.t2 + self.t1 + self._inverse_high(dL - self.Lt1)

    def aggregate(self, n_edges: float, background: float = 0.0) -> 'SeasonalTransmissibility':
        """
        Signal n_edges * lambda(t) + background with the same phase boundaries

        Used to time-rescale the total event rate of a network where
        n_edges susceptible-infected edges carry lambda(t) and the
        constant background collects recoveries.
        """
        if n_edges < 0 or background < 0:
            raise PreconditionViolation("Aggregate weights must be non-negative")
        return SeasonalTransmissibility(
            t1=self.t1,
            t2=self.t2,
            base_rate=n_edges * self.base_rate + background,
            rate_boost=n_edges * self.rate_boost,
        )

    def tabulate(self, t_max: float = 10.0, dt: float = 0.01) -> pd.DataFrame:
        """Rate and integral sampled on a regular grid"""
        times = np.arange(0.0, t_max, dt)
        return pd.DataFrame({
            't': times,
            'l': [self.evaluate(t) for t in times],
            'L': [self.evaluate_integral(t) for t in times],
        })

    def write_table(self, path, t_max: float = 10.0, dt: float = 0.01):
        """Write tabulate() output as tab-separated text with 3 decimals"""
        self.tabulate(t_max, dt).to_csv(path, sep='\t', index=False, float_format='%1.3f')


@dataclass(frozen=True)
class SeasonalParameters:
    """Engine parameters: seasonal transmissibility plus recovery rate"""

    t1: float
    t2: float
    base_rate: float      # lambda, basal transmissibility
    rate_boost: float     # dlambda, added during [t1, t2)
    recovery_rate: float  # mu

    def __post_init__(self):
        _check_finite(recovery_rate=self.recovery_rate)
        if self.recovery_rate < 0:
            raise ConfigurationError(f"recovery_rate must be non-negative, got {self.recovery_rate}")
        # Validates the remaining four
        self.transmissibility()

    def transmissibility(self) -> SeasonalTransmissibility:
        return SeasonalTransmissibility(self.t1, self.t2, self.base_rate, self.rate_boost)

    @property
    def mean_rate(self) -> float:
        """Time-averaged transmissibility over one period"""
        return self.transmissibility().Lt2 / self.t2


# Presets used by the command-line driver
CONTINUOUS_SCENARIO = SeasonalParameters(t1=10, t2=20, base_rate=2.0, rate_boost=0.0, recovery_rate=10.0)
OSCILLATING_SCENARIO = SeasonalParameters(t1=10, t2=20, base_rate=2.0, rate_boost=6.0, recovery_rate=2.0)


if __name__ == "__main__":
    rate = OSCILLATING_SCENARIO.transmissibility()

    print("Seasonal Transmissibility Test")
    print("=" * 50)
    print(f"Period: {rate.period}, Lt1={rate.Lt1:.2f}, Lt2={rate.Lt2:.2f}")
    print(f"Mean rate: {OSCILLATING_SCENARIO.mean_rate:.2f}")
    for t in [0.0, 5.0, 10.0, 15.0, 25.0, 37.5]:
        L = rate.evaluate_integral(t)
        print(f"  t={t:5.1f}: l={rate(t):.2f}, L={L:7.2f}, G^-1(L)={rate.evaluate_integral_inverse(L):.3f}")
