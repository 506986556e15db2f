"""
Summary statistics of the last simulated beat.
"""
from __future__ import annotations
from dataclasses import dataclass, asdict

import numpy as np

from .errors import InvalidInput
from .trace import Trace


@dataclass(frozen=True)
class Metrics:
    edv: float  # mL
    esv: float  # mL
    sv: float   # mL
    co: float   # L/min
    map: float  # mmHg
    sbp: float  # mmHg
    dbp: float  # mmHg
    pp: float   # mmHg
    ef: float   # %

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


def extract_metrics(trace: Trace) -> Metrics:
    """
    Reduce a last-beat trace to volumes, flows and arterial pressures.

    EDV/ESV are the max/min ventricular volume over the trace, SV = max(0, EDV - ESV),
    CO = HR * SV / 1000, MAP is the time mean of arterial pressure and
    EF = 100 * SV / EDV (0 when EDV <= 0).
    """
    if len(trace) == 0:
        raise InvalidInput("cannot extract metrics from an empty trace")

    V = np.asarray(trace.ventricular_volume, dtype=float)
    P = np.asarray(trace.arterial_pressure, dtype=float)

    edv = float(V.max())
    esv = float(V.min())
    sv = max(0.0, edv - esv)
    co = trace.heart_rate * sv / 1000.0
    sbp = float(P.max())
    dbp = float(P.min())
    return Metrics(
        edv=edv,
        esv=esv,
        sv=sv,
        co=co,
        map=float(P.mean()),
        sbp=sbp,
        dbp=dbp,
        pp=sbp - dbp,
        ef=(sv / edv) * 100.0 if edv > 0 else 0.0,
    )
