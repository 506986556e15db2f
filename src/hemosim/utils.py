from __future__ import annotations
import math

from .constants import (
    SVR_TO_WOOD, SECONDS_PER_MINUTE,
    SYSTOLIC_FRACTION, DIASTOLIC_TONE, DIASTOLIC_DECAY,
)
from .errors import InvalidParameter


def svr_to_hydraulic(svr: float) -> float:
    """
    Systemic vascular resistance [dyn·s·cm^-5] -> peripheral resistance [mmHg/(mL/s)].
    R = (SVR / 80) / 60
    """
    if not svr > 0.0:
        raise InvalidParameter(f"vascular resistance must be > 0, got {svr!r}")
    return (svr / SVR_TO_WOOD) / SECONDS_PER_MINUTE


def normalized_elastance(phase: float, ts: float = SYSTOLIC_FRACTION) -> float:
    """
    Normalized LV elastance in [0, 1] at a fraction `phase` of the cycle.
    Systole: sin(pi*x)^1.5 on [0, ts); diastole: small decaying tone.
    The waveform jumps from 0 to DIASTOLIC_TONE at phase == ts.
    """
    if phase < ts:
        x = phase / ts
        return max(math.sin(math.pi * x), 0.0) ** 1.5
    x = (phase - ts) / (1.0 - ts)
    return DIASTOLIC_TONE * math.exp(-DIASTOLIC_DECAY * x)


def scaled_elastance(phase: float, e_min: float, e_max: float) -> float:
    # mmHg/mL
    return e_min + (e_max - e_min) * normalized_elastance(phase)


def ventricular_pressure(elastance: float, volume: float, v0: float) -> float:
    """P_lv = E * max(V - V0, 0); never negative."""
    return elastance * max(volume - v0, 0.0)
