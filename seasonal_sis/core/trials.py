"""
Monte Carlo Trial Runner
========================
Repeats independent SIS trials and reduces them to the expected
long-run number of infected nodes
"""

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, TextIO, Tuple

import numpy as np
import pandas as pd

from .disease_params import SeasonalParameters
from .exceptions import PreconditionViolation
from .population import ContactNetwork
from .sis_model import SimulationConfig, SISSimulator, check_rate_mode

logger = logging.getLogger(__name__)


@dataclass
class MonteCarloResult:
    """
    Final state of every trial

    Attributes:
        final_counts: Infected count when each trial stopped
        final_times: Clock value when each trial stopped
        n_nodes: Network size
        t_max: Horizon the trials were run to
    """
    final_counts: np.ndarray
    final_times: np.ndarray
    n_nodes: int
    t_max: float

    @property
    def n_trials(self) -> int:
        return len(self.final_counts)

    @property
    def mean(self) -> float:
        """Monte Carlo estimate of the asymptotic number of infected nodes"""
        return float(np.mean(self.final_counts))

    @property
    def mean_fraction(self) -> float:
        return self.mean / self.n_nodes

    @property
    def std(self) -> float:
        return float(np.std(self.final_counts))

    @property
    def extinction_probability(self) -> float:
        """Share of trials that died out before the horizon"""
        return float(np.mean(self.final_counts == 0))

    def get_statistics(self) -> Dict[str, float]:
        counts = self.final_counts
        return {
            'mean': self.mean,
            'std': self.std,
            'sem': self.std / np.sqrt(self.n_trials),
            'min': float(np.min(counts)),
            'q25': float(np.percentile(counts, 25)),
            'median': float(np.median(counts)),
            'q75': float(np.percentile(counts, 75)),
            'max': float(np.max(counts)),
            'mean_fraction': self.mean_fraction,
            'extinction_probability': self.extinction_probability,
        }

    def to_frame(self) -> pd.DataFrame:
        """One row per trial"""
        return pd.DataFrame({
            'trial': np.arange(self.n_trials),
            'final_time': self.final_times,
            'final_infected': self.final_counts,
            'final_fraction': self.final_counts / self.n_nodes,
        })


def _run_to_horizon(params: SeasonalParameters,
                    config: SimulationConfig,
                    network: ContactNetwork,
                    fraction: float,
                    t_max: float) -> Tuple[int, float]:
    """One trial on a private engine and infection buffer"""
    simulator = SISSimulator(params, config)
    simulator.reset(network)
    simulator.infect_random_nodes(fraction, network)
    ninfected = simulator.run_until(network, t_max)
    return ninfected, simulator.state.t


class TrialRunner:
    """
    Runs statistically independent trials, optionally across processes

    Every trial gets its own SeedSequence child of config.seed, its own
    SISSimulator and its own copy of the network's infection buffer, so
    results for a fixed seed do not depend on n_workers.
    """

    def __init__(self,
                 params: SeasonalParameters,
                 config: SimulationConfig = None,
                 n_workers: int = 1):
        if n_workers < 1:
            raise PreconditionViolation("n_workers must be at least 1")
        self.params = params
        self.config = config if config is not None else SimulationConfig()
        check_rate_mode(params, self.config)
        self.n_workers = n_workers

    def _trial_configs(self, n_trials: int) -> List[SimulationConfig]:
        if n_trials < 1:
            raise PreconditionViolation("n_trials must be at least 1")
        seed = self.config.seed
        if not isinstance(seed, np.random.SeedSequence):
            seed = np.random.SeedSequence(seed)
        return [replace(self.config, seed=child) for child in seed.spawn(n_trials)]

    def run(self,
            fraction: float,
            network: ContactNetwork,
            n_trials: int,
            t_max: float) -> MonteCarloResult:
        """
        Run n_trials trials to t_max or extinction

        Args:
            fraction: Fraction of nodes infected at the start of each trial
            network: Contact network; only its topology is used
            n_trials: Number of independent trials
            t_max: Time horizon

        Returns:
            MonteCarloResult with final counts and times
        """
        configs = self._trial_configs(n_trials)
        jobs = [(self.params, config, network.copy(), fraction, t_max) for config in configs]

        if self.n_workers == 1:
            outcomes = [_run_to_horizon(*job) for job in jobs]
        else:
            with ProcessPoolExecutor(max_workers=self.n_workers) as executor:
                outcomes = list(executor.map(_run_to_horizon, *zip(*jobs)))

        counts, times = zip(*outcomes)
        result = MonteCarloResult(
            final_counts=np.array(counts, dtype=np.int64),
            final_times=np.array(times, dtype=float),
            n_nodes=network.vertex_count(),
            t_max=t_max,
        )
        logger.info("%d trials: mean infected %.3f, extinction probability %.3f",
                    result.n_trials, result.mean, result.extinction_probability)
        return result

    def asymptotic_infected(self,
                            fraction: float,
                            network: ContactNetwork,
                            n_trials: int,
                            t_max: float) -> float:
        """Mean final infected count across trials"""
        return self.run(fraction, network, n_trials, t_max).mean

    def run_time_series(self,
                        fraction: float,
                        network: ContactNetwork,
                        n_trials: int,
                        t_max: float,
                        output: Optional[TextIO] = None,
                        label: str = "") -> pd.DataFrame:
        """
        Sequential trials with snapshot recording

        Returns:
            Concatenated snapshot frames with an extra 'trial' column
        """
        frames = []
        for trial, config in enumerate(self._trial_configs(n_trials)):
            simulator = SISSimulator(self.params, config)
            frame = simulator.run_single_trial(fraction, network.copy(), t_max, output=output, label=label)
            frame['trial'] = trial
            frames.append(frame)
        return pd.concat(frames, ignore_index=True)
