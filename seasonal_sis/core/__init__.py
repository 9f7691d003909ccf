"""Core simulation components"""

from .disease_params import (
    SeasonalTransmissibility,
    SeasonalParameters,
    CONTINUOUS_SCENARIO,
    OSCILLATING_SCENARIO,
)
from .exceptions import (
    SeasonalSISError,
    ConfigurationError,
    PreconditionViolation,
    DegenerateRateError,
)
from .population import ContactNetwork, NodeState, SimulationState
from .sis_model import (
    SISSimulator,
    SimulationConfig,
    RateMode,
    Infection,
    Recovery,
    OUTPUT_HEADER,
    format_snapshot,
    write_header,
)
from .trials import TrialRunner, MonteCarloResult

__all__ = [
    'SeasonalTransmissibility',
    'SeasonalParameters',
    'CONTINUOUS_SCENARIO',
    'OSCILLATING_SCENARIO',
    'SeasonalSISError',
    'ConfigurationError',
    'PreconditionViolation',
    'DegenerateRateError',
    'ContactNetwork',
    'NodeState',
    'SimulationState',
    'SISSimulator',
    'SimulationConfig',
    'RateMode',
    'Infection',
    'Recovery',
    'OUTPUT_HEADER',
    'format_snapshot',
    'write_header',
    'TrialRunner',
    'MonteCarloResult',
]
