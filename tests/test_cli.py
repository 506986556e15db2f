# tests/test_cli.py
import json
from pathlib import Path

import pytest

from hemosim import load_preset
from hemosim.cli import main
from hemosim.config import RunConfig, emax_from_contractility

def _run(capsys, argv):
    code = main(argv)
    out = capsys.readouterr().out
    return code, (json.loads(out) if code == 0 else None)

def test_preset_run_prints_metrics(capsys):
    code, out = _run(capsys, ["--preset", "normal", "--beats", "2", "--steps-per-beat", "100"])
    assert code == 0
    assert out["options"] == {"steps_per_beat": 100, "beats": 2}
    assert out["metrics"]["sbp"] > out["metrics"]["dbp"]
    assert out["display"]["CO"].endswith("L/min")
    assert out["files"] == {}

def test_overrides_and_auto_emax(capsys):
    code, out = _run(capsys, ["--svr", "2400", "--contractility", "1.0", "--auto-emax",
                              "--beats", "2"])
    assert code == 0
    assert out["parameters"]["svr"] == 2400.0
    assert out["parameters"]["Emax"] == pytest.approx(emax_from_contractility(1.0))

def test_outputs_written(capsys, tmp_path):
    outdir = tmp_path / "out"
    code, out = _run(capsys, ["--beats", "2", "--outdir", str(outdir), "--csv", "--plots",
                              "--export", str(tmp_path / "scenario.json")])
    assert code == 0
    assert Path(out["files"]["csv"]).exists()
    assert len(out["files"]["plots"]) == 2
    assert json.loads((tmp_path / "scenario.json").read_text())["hr"] == 75.0

def test_scenario_and_config_sources(capsys, tmp_path):
    scenario = tmp_path / "s.json"
    scenario.write_text(json.dumps({"hr": 60}), encoding="utf-8")
    code, out = _run(capsys, ["--scenario", str(scenario), "--beats", "2"])
    assert code == 0 and out["parameters"]["hr"] == 60.0

    cfg = tmp_path / "run.yaml"
    RunConfig.from_dict({"preset": "hfref", "simulation": {"beats": 3, "steps_per_beat": 50}}).save(cfg)
    code, out = _run(capsys, ["--config", str(cfg)])
    assert code == 0
    assert out["parameters"] == load_preset("hfref").to_scenario()
    assert out["options"] == {"steps_per_beat": 50, "beats": 3}

def test_save_and_load_local(capsys, tmp_path, monkeypatch):
    monkeypatch.setenv("HEMOSIM_HOME", str(tmp_path))
    code, out = _run(capsys, ["--preset", "brady", "--beats", "2", "--save-local"])
    assert code == 0 and Path(out["files"]["saved"]).exists()
    code, out = _run(capsys, ["--load-local", "--beats", "2"])
    assert code == 0 and out["parameters"]["hr"] == 40.0

def test_invalid_parameters_exit_2(capsys):
    assert main(["--emax", "0.06"]) == 2
    assert main(["--beats", "0"]) == 2

def test_missing_local_scenario_exits_2(capsys, tmp_path, monkeypatch):
    monkeypatch.setenv("HEMOSIM_HOME", str(tmp_path / "empty"))
    assert main(["--load-local"]) == 2

def test_divergence_exits_3(capsys):
    assert main(["--compliance", "1e-6"]) == 3

def test_missing_config_exits_2(capsys, tmp_path):
    assert main(["--config", str(tmp_path / "nope.yaml")]) == 2

@pytest.mark.parametrize("beats", ["many", "2.5"])
def test_bad_config_beats_exit_2(capsys, tmp_path, beats):
    cfg = tmp_path / "run.yaml"
    cfg.write_text(f"simulation:\n  beats: {beats}\n", encoding="utf-8")
    assert main(["--config", str(cfg)]) == 2

def test_undecodable_scenario_exits_2(capsys, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_bytes(b'{"hr": 75, "edv": "\xff"}')
    assert main(["--scenario", str(bad)]) == 2
