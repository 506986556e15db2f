import argparse, json, logging, os, sys

from .config import Parameters, RunConfig, RunOptions, load_preset, normalize_parameters
from .constants import PRESETS
from .errors import InvalidInput, InvalidParameter, NumericalInstability
from .ode import simulate
from .report import export_csv, format_metrics, plot_results
from .storage import ScenarioStore, export_scenario, import_scenario

logger = logging.getLogger("hemosim")

# cli flag -> Parameters field
_OVERRIDES = {
    "hr": "heart_rate",
    "edv": "edv",
    "esv": "esv",
    "contractility": "contractility",
    "svr": "vascular_resistance",
    "compliance": "compliance",
    "rap": "venous_pressure",
    "emax": "max_elastance",
    "emin": "min_elastance",
    "v0": "unstressed_volume",
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Simulate one LV + 3-element Windkessel cardiac cycle and report hemodynamics.")
    src = p.add_mutually_exclusive_group()
    src.add_argument("--preset", choices=sorted(PRESETS), default=None,
                     help="start from a named preset (default: normal)")
    src.add_argument("--scenario", default=None, help="scenario JSON file to import")
    src.add_argument("--config", default=None, help="YAML run configuration")
    src.add_argument("--load-local", action="store_true", help="start from the locally saved scenario")

    p.add_argument("--hr", type=float, help="heart rate [bpm]")
    p.add_argument("--edv", type=float, help="end-diastolic volume hint [mL]")
    p.add_argument("--esv", type=float, help="end-systolic volume hint [mL]")
    p.add_argument("--contractility", type=float, help="contractility 0.1..1.0")
    p.add_argument("--svr", type=float, help="systemic vascular resistance [dyn·s·cm^-5]")
    p.add_argument("--compliance", type=float, help="arterial compliance [mL/mmHg]")
    p.add_argument("--rap", type=float, help="venous pressure [mmHg]")
    p.add_argument("--emax", type=float, help="end-systolic elastance [mmHg/mL]")
    p.add_argument("--emin", type=float, help="baseline elastance [mmHg/mL]")
    p.add_argument("--v0", type=float, help="unstressed volume [mL]")
    p.add_argument("--auto-emax", action="store_true", default=None,
                   help="derive Emax from contractility")

    p.add_argument("--beats", type=int, default=None)
    p.add_argument("--steps-per-beat", type=int, default=None)
    p.add_argument("--outdir", default="outputs")
    p.add_argument("--csv", action="store_true", help="write the last-beat trace as CSV")
    p.add_argument("--plots", action="store_true", help="write waveform and PV-loop PNGs")
    p.add_argument("--export", default=None, help="write the scenario used to this JSON file")
    p.add_argument("--save-local", action="store_true", help="save the scenario locally")
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def _resolve(args):
    """Return (parameters before normalization, auto_elastance, options)."""
    options = RunOptions()
    auto = False
    if args.config:
        cfg = RunConfig.from_yaml(args.config)
        params = Parameters.from_scenario(cfg.scenario)
        auto, options = cfg.auto_elastance, cfg.options()
    elif args.scenario:
        params, auto = import_scenario(args.scenario)
    elif args.load_local:
        params, auto = ScenarioStore().load()
    else:
        params = load_preset(args.preset or "normal")

    changes = {field: getattr(args, flag) for flag, field in _OVERRIDES.items()
               if getattr(args, flag) is not None}
    if changes:
        params = params.replace(**changes)
    if args.auto_emax is not None:
        auto = args.auto_emax
    options = RunOptions(
        steps_per_beat=args.steps_per_beat if args.steps_per_beat is not None else options.steps_per_beat,
        beats=args.beats if args.beats is not None else options.beats,
    )
    return params, auto, options


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        raw, auto, options = _resolve(args)
        params = normalize_parameters(raw, auto_elastance=auto)
        result = simulate(params, options)
    except (InvalidParameter, InvalidInput) as e:
        logger.error("invalid input: %s", e)
        return 2
    except NumericalInstability as e:
        logger.error("simulation diverged: %s", e)
        return 3

    outputs = result.as_dict()
    outputs["display"] = format_metrics(result.metrics)
    files = {}
    if args.csv:
        files["csv"] = export_csv(result, os.path.join(args.outdir, "last_beat.csv"))
    if args.plots:
        files["plots"] = plot_results(result, output_dir=args.outdir)
    if args.export:
        files["scenario"] = str(export_scenario(raw, args.export, auto))
    if args.save_local:
        files["saved"] = str(ScenarioStore().save(raw, auto))
    outputs["files"] = files

    print(json.dumps(outputs, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
