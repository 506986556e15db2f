from __future__ import annotations
from dataclasses import dataclass

import numpy as np

__all__ = ["Trace", "LastBeatLogger"]


def _frozen(a: np.ndarray) -> np.ndarray:
    a.flags.writeable = False
    return a


@dataclass(frozen=True, eq=False)
class Trace:
    """Last-beat samples, ordered by time. Arrays are read-only."""
    heart_rate: float
    phase: np.ndarray
    arterial_pressure: np.ndarray     # mmHg
    ventricular_pressure: np.ndarray  # mmHg
    ventricular_volume: np.ndarray    # mL

    def __len__(self) -> int:
        return len(self.phase)

    def pv_loop(self) -> tuple[np.ndarray, np.ndarray]:
        return self.ventricular_volume, self.ventricular_pressure

    def __eq__(self, other) -> bool:
        if not isinstance(other, Trace):
            return NotImplemented
        return (
            self.heart_rate == other.heart_rate
            and np.array_equal(self.phase, other.phase)
            and np.array_equal(self.arterial_pressure, other.arterial_pressure)
            and np.array_equal(self.ventricular_pressure, other.ventricular_pressure)
            and np.array_equal(self.ventricular_volume, other.ventricular_volume)
        )


class LastBeatLogger:
    """
    Fixed-size ring of `steps_per_beat` slots. Step s is written to slot
    s % steps_per_beat, so once a whole number of beats has been logged the
    slots hold the last beat in step order.
    """
    def __init__(self, steps_per_beat: int):
        self.n = int(steps_per_beat)
        self.phase = np.zeros(self.n)
        self.P_art = np.zeros(self.n)
        self.P_lv = np.zeros(self.n)
        self.V_lv = np.zeros(self.n)

    def step(self, s: int, phase: float, P_art: float, P_lv: float, V_lv: float):
        i = s % self.n
        self.phase[i] = phase
        self.P_art[i] = P_art
        self.P_lv[i] = P_lv
        self.V_lv[i] = V_lv

    def to_trace(self, heart_rate: float) -> Trace:
        return Trace(
            heart_rate=float(heart_rate),
            phase=_frozen(self.phase.copy()),
            arterial_pressure=_frozen(self.P_art.copy()),
            ventricular_pressure=_frozen(self.P_lv.copy()),
            ventricular_volume=_frozen(self.V_lv.copy()),
        )
