from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Optional

from .config import Parameters, RunOptions
from .constants import MITRAL_RESISTANCE, AORTIC_RESISTANCE, ARTERIAL_PRESSURE_SEED
from .errors import NumericalInstability
from .metrics import Metrics, extract_metrics
from .trace import LastBeatLogger, Trace
from .utils import svr_to_hydraulic, scaled_elastance, ventricular_pressure

logger = logging.getLogger(__name__)


def valve_flow(p_up: float, p_down: float, R: float) -> float:
    """Ideal diode valve: Q = (p_up - p_down) / R when open, 0 otherwise [mL/s]."""
    dp = p_up - p_down
    if dp <= 0.0:
        return 0.0
    return dp / R


class Valve:
    """One-way valve with a fixed open resistance [mmHg/(mL/s)]."""
    def __init__(self, name: str, R: float):
        self.name = name
        self.R = float(R)

    def flow(self, p_up: float, p_down: float) -> float:
        return valve_flow(p_up, p_down, self.R)


MITRAL = Valve("mitral", MITRAL_RESISTANCE)
AORTIC = Valve("aortic", AORTIC_RESISTANCE)


@dataclass
class CardioState:
    """Integrated state. Venous pressure is held fixed for the run."""
    V_lv: float   # mL
    P_art: float  # mmHg
    P_ven: float  # mmHg

    @classmethod
    def initial(cls, params: Parameters) -> "CardioState":
        return cls(V_lv=float(params.edv), P_art=ARTERIAL_PRESSURE_SEED,
                   P_ven=float(params.venous_pressure))


def euler_step(state: CardioState, params: Parameters, R_per: float, dt: float, phase: float) -> float:
    """
    Advance `state` one explicit Euler step in place and return the
    ventricular pressure used for the step. The return value is not the
    new state; `state` itself holds the updated volume and pressure.

    Both derivatives are evaluated from the pre-step state:
        C dP_art/dt = Q_out - P_art / R_per
          dV_lv/dt  = Q_in - Q_out
    """
    E = scaled_elastance(phase, params.min_elastance, params.max_elastance)
    P_lv = ventricular_pressure(E, state.V_lv, params.unstressed_volume)

    Q_in = MITRAL.flow(state.P_ven, P_lv)
    Q_out = AORTIC.flow(P_lv, state.P_art)

    dP = (Q_out - state.P_art / R_per) / params.compliance * dt
    dV = (Q_in - Q_out) * dt

    state.P_art += dP
    state.V_lv += dV
    return P_lv


@dataclass(frozen=True)
class SimulationResult:
    parameters: Parameters
    options: RunOptions
    trace: Trace
    metrics: Metrics

    def as_dict(self) -> dict:
        return {
            "parameters": self.parameters.to_scenario(),
            "options": {"steps_per_beat": self.options.steps_per_beat, "beats": self.options.beats},
            "metrics": self.metrics.as_dict(),
        }


def simulate(params: Parameters, options: Optional[RunOptions] = None) -> SimulationResult:
    """
    Run `options.beats` cardiac cycles of the LV + Windkessel model and keep the last one.

    Parameters
    ----------
    params : Parameters
        Model parameters (already normalized by the caller).
    options : RunOptions, optional
        Steps per beat and number of beats; defaults to 400 x 8.

    Returns
    -------
    SimulationResult
        Last-beat trace and its summary metrics.

    Raises
    ------
    InvalidParameter
        If a parameter or option is out of its domain (nothing is integrated).
    NumericalInstability
        If the volume or arterial pressure becomes non-finite.
    """
    options = options if options is not None else RunOptions()
    params.validate()
    options.validate()

    # --- timing
    T_cyc = 60.0 / params.heart_rate
    dt = T_cyc / options.steps_per_beat
    n_steps = options.total_steps
    first_kept = n_steps - options.steps_per_beat

    # --- afterload
    R_per = svr_to_hydraulic(params.vascular_resistance)  # mmHg/(mL/s)

    logger.debug("simulate: hr=%.3g bpm dt=%.6g s R_per=%.6g steps=%d",
                 params.heart_rate, dt, R_per, n_steps)

    state = CardioState.initial(params)
    log = LastBeatLogger(options.steps_per_beat)

    # --- main loop
    for s in range(n_steps):
        t = s * dt
        phase = (t % T_cyc) / T_cyc
        P_lv = euler_step(state, params, R_per, dt, phase)

        for name, value in (("ventricular volume", state.V_lv), ("arterial pressure", state.P_art)):
            if not math.isfinite(value):
                logger.error("numerical instability at step %d: %s = %r", s, name, value)
                raise NumericalInstability(s, name, value)

        if s >= first_kept:
            log.step(s, phase, state.P_art, P_lv, state.V_lv)

    trace = log.to_trace(params.heart_rate)
    return SimulationResult(parameters=params, options=options, trace=trace,
                            metrics=extract_metrics(trace))
