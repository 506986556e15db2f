# tests/test_engine.py
from concurrent.futures import ThreadPoolExecutor
import math

import numpy as np
import pytest

from hemosim import (
    CardioState, InvalidParameter, NumericalInstability, Parameters, RunOptions,
    euler_step, load_preset, simulate,
)
from hemosim.utils import scaled_elastance

NORMAL = load_preset("normal")


def test_euler_step_uses_pre_step_state():
    params = NORMAL.replace(venous_pressure=100.0)
    state = CardioState(V_lv=35.0, P_art=10.0, P_ven=100.0)
    R_per, dt, phase = 0.25, 1e-4, 0.165

    E = scaled_elastance(phase, params.min_elastance, params.max_elastance)
    P_lv = E * (35.0 - params.unstressed_volume)
    Q_in = (100.0 - P_lv) / 0.005
    Q_out = (P_lv - 10.0) / 0.0025
    assert Q_in > 0 and Q_out > 0

    returned = euler_step(state, params, R_per, dt, phase)

    assert not isinstance(returned, CardioState)
    assert returned == pytest.approx(P_lv)
    assert state.P_art == pytest.approx(10.0 + (Q_out - 10.0 / R_per) / params.compliance * dt)
    assert state.V_lv == pytest.approx(35.0 + (Q_in - Q_out) * dt)
    assert state.P_ven == 100.0


def test_initial_state_is_seeded_from_parameters():
    s = CardioState.initial(NORMAL.replace(edv=95.0, venous_pressure=4.0))
    assert (s.V_lv, s.P_art, s.P_ven) == (95.0, 90.0, 4.0)


def test_trace_holds_exactly_the_last_beat():
    res = simulate(NORMAL, RunOptions(steps_per_beat=400, beats=8))
    tr = res.trace
    assert len(tr) == 400
    assert tr.heart_rate == 75.0
    assert tr.phase[0] == pytest.approx(0.0, abs=1e-9)
    assert tr.phase[-1] == pytest.approx(399 / 400)
    assert np.all(np.diff(tr.phase) > 0)
    assert np.all((tr.phase >= 0.0) & (tr.phase < 1.0))
    assert np.all(tr.ventricular_pressure >= 0.0)


def test_trace_is_read_only():
    tr = simulate(NORMAL, RunOptions(steps_per_beat=50, beats=2)).trace
    with pytest.raises(ValueError):
        tr.arterial_pressure[0] = 0.0


def test_simulation_is_deterministic():
    a = simulate(NORMAL)
    b = simulate(NORMAL)
    assert a.trace == b.trace
    assert a.metrics == b.metrics
    assert np.array_equal(a.trace.ventricular_volume, b.trace.ventricular_volume)


def test_concurrent_runs_match_sequential_runs():
    names = ["normal", "hypertension", "sepsis", "hfref", "hfpef", "tachy", "brady"]
    params = [load_preset(n) for n in names]
    expected = [simulate(p).metrics for p in params]
    with ThreadPoolExecutor(max_workers=4) as pool:
        got = list(pool.map(lambda p: simulate(p).metrics, params))
    assert got == expected


def test_default_options_are_400_steps_by_8_beats():
    res = simulate(NORMAL)
    assert res.options == RunOptions(400, 8)
    assert len(res.trace) == 400


def test_normal_preset_reference_values():
    m = simulate(NORMAL, RunOptions(400, 8)).metrics
    assert m.edv == pytest.approx(39.6135, rel=1e-4)
    assert m.esv == pytest.approx(16.7276, rel=1e-4)
    assert m.sv == pytest.approx(22.8859, rel=1e-4)
    assert m.map == pytest.approx(7.1501, rel=1e-4)
    assert m.sbp == pytest.approx(14.0836, rel=1e-4)
    assert m.dbp == pytest.approx(2.2666, rel=1e-4)


def test_normal_preset_sanity():
    m = simulate(NORMAL).metrics
    assert m.edv >= m.esv
    assert m.esv > 0
    assert 0 < m.dbp < m.map < m.sbp
    assert m.pp == m.sbp - m.dbp
    assert m.co == 75.0 * m.sv / 1000.0
    assert 0 < m.ef < 100


def test_doubling_afterload_raises_map_without_raising_sv():
    base = simulate(NORMAL).metrics
    high = simulate(NORMAL.replace(vascular_resistance=2 * NORMAL.vascular_resistance)).metrics
    assert high.map > base.map
    assert high.sv <= base.sv


def test_more_beats_barely_change_pressures():
    m8 = simulate(NORMAL, RunOptions(400, 8)).metrics
    m16 = simulate(NORMAL, RunOptions(400, 16)).metrics
    for name in ("map", "sbp", "dbp"):
        a, b = getattr(m8, name), getattr(m16, name)
        assert abs(b - a) / abs(a) < 0.05, name


def test_coarse_steps_run_without_clamping():
    # a very coarse step drives the volume negative; no clamp, no error
    res = simulate(NORMAL, RunOptions(steps_per_beat=10, beats=8))
    assert res.trace.ventricular_volume.min() < 0
    assert np.all(res.trace.ventricular_pressure >= 0)


def test_divergence_raises_numerical_instability():
    with pytest.raises(NumericalInstability) as exc:
        simulate(NORMAL.replace(compliance=1e-6))
    err = exc.value
    assert 0 <= err.step < 400 * 8
    assert not math.isfinite(err.value)
    assert err.variable in ("ventricular volume", "arterial pressure")


@pytest.mark.parametrize("changes", [
    {"heart_rate": 0.0},
    {"heart_rate": -60.0},
    {"compliance": 0.0},
    {"vascular_resistance": 0.0},
    {"vascular_resistance": -5.0},
    {"max_elastance": 0.06},
    {"max_elastance": 0.01},
    {"min_elastance": -0.1},
    {"unstressed_volume": -1.0},
    {"edv": float("nan")},
])
def test_invalid_parameters_are_rejected(changes):
    with pytest.raises(InvalidParameter):
        simulate(NORMAL.replace(**changes))


@pytest.mark.parametrize("options", [
    RunOptions(steps_per_beat=0, beats=8),
    RunOptions(steps_per_beat=400, beats=0),
    RunOptions(steps_per_beat=-1, beats=8),
    RunOptions(steps_per_beat=2.5, beats=8),
])
def test_invalid_options_are_rejected(options):
    with pytest.raises(InvalidParameter):
        simulate(NORMAL, options)


def test_result_as_dict():
    out = simulate(NORMAL, RunOptions(100, 2)).as_dict()
    assert out["parameters"]["svr"] == 1200.0
    assert out["options"] == {"steps_per_beat": 100, "beats": 2}
    assert set(out["metrics"]) == {"edv", "esv", "sv", "co", "map", "sbp", "dbp", "pp", "ef"}
