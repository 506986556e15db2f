"""
Tabular and graphical output of a simulation result.
"""
from __future__ import annotations
import logging
import os

import numpy as np
import pandas as pd

from .metrics import Metrics
from .trace import Trace

logger = logging.getLogger(__name__)


def trace_frame(trace: Trace) -> pd.DataFrame:
    return pd.DataFrame({
        "phase": np.asarray(trace.phase),
        "P_art_mmHg": np.asarray(trace.arterial_pressure),
        "P_lv_mmHg": np.asarray(trace.ventricular_pressure),
        "V_lv_mL": np.asarray(trace.ventricular_volume),
    })


def export_csv(result, path: str = "last_beat.csv") -> str:
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    trace_frame(result.trace).to_csv(path, index=False)
    logger.info("trace written to %s", path)
    return path


def format_metrics(m: Metrics) -> dict[str, str]:
    """Display strings for the outputs panel."""
    return {
        "SV": f"{round(m.sv)} mL",
        "CO": f"{m.co:.2f} L/min",
        "MAP": f"{m.map:.1f} mmHg",
        "BP": f"{round(m.sbp)} / {round(m.dbp)}",
        "PP": f"{round(m.pp)} mmHg",
        "EF": f"{round(m.ef)}",
    }


def plot_results(result, output_dir: str = "outputs") -> list[str]:
    """Write the arterial pressure waveform and the LV PV loop as PNGs."""
    from matplotlib.figure import Figure

    os.makedirs(output_dir, exist_ok=True)
    trace, m = result.trace, result.metrics
    pngs = []

    fig = Figure(figsize=(9, 4.5))
    ax = fig.add_subplot()
    x = np.arange(len(trace)) / len(trace)
    ax.plot(x, trace.arterial_pressure, color="#0b67ff")
    ax.set_xlabel("fraction of cycle"); ax.set_ylabel("mmHg")
    ax.set_title(f"Arterial pressure waveform (SBP {m.sbp:.0f} / DBP {m.dbp:.0f} mmHg)")
    fig.tight_layout()
    p0 = os.path.join(output_dir, "arterial_pressure.png"); fig.savefig(p0, dpi=150); pngs.append(p0)

    V, P = trace.pv_loop()
    fig = Figure(figsize=(5.0, 5.0))
    ax = fig.add_subplot()
    ax.fill(V, P, color="#ff6b6b", alpha=0.06)
    ax.plot(V, P, "-", color="#ff6b6b", label="PV loop")
    ax.set_xlabel("Volume (mL)"); ax.set_ylabel("Pressure (mmHg)")
    ax.set_title("Ventricular PV Loop"); ax.legend()
    fig.tight_layout()
    p1 = os.path.join(output_dir, "pv_loop.png"); fig.savefig(p1, dpi=150); pngs.append(p1)

    logger.info("plots written to %s", output_dir)
    return pngs
