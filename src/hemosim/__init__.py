"""
hemosim

Lumped-parameter simulator of one cardiac cycle: a time-varying-elastance
left ventricle coupled through mitral and aortic diode valves to a
Windkessel arterial load, integrated with explicit Euler steps.

Main modules:
- utils: resistance conversion and elastance waveform
- ode: valves, state, integrator and simulation engine
- metrics: last-beat summary statistics
- config: parameters, run options, presets and YAML run configuration
- storage: scenario import/export and local persistence
- report: CSV and plot output
"""

__version__ = "0.1.0"

from .config import (
    Parameters, RunOptions, RunConfig,
    normalize_parameters, emax_from_contractility, load_preset,
)
from .constants import PRESETS
from .errors import HemosimError, InvalidParameter, InvalidInput, NumericalInstability
from .metrics import Metrics, extract_metrics
from .ode import CardioState, SimulationResult, Valve, euler_step, simulate, valve_flow
from .trace import Trace
from .utils import normalized_elastance, scaled_elastance, svr_to_hydraulic, ventricular_pressure

__all__ = [
    "Parameters", "RunOptions", "RunConfig",
    "normalize_parameters", "emax_from_contractility", "load_preset", "PRESETS",
    "HemosimError", "InvalidParameter", "InvalidInput", "NumericalInstability",
    "Metrics", "extract_metrics",
    "CardioState", "SimulationResult", "Valve", "euler_step", "simulate", "valve_flow",
    "Trace",
    "normalized_elastance", "scaled_elastance", "svr_to_hydraulic", "ventricular_pressure",
]
