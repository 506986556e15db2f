"""
Configuration management for hemodynamic simulations.

This module provides the immutable parameter records consumed by the
simulation engine, the mapping to and from the scenario document shape,
and a YAML-backed run configuration for the command line.
"""

import math
from dataclasses import dataclass, field, asdict, replace as _replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union
import yaml

from .constants import (
    DEFAULT_SIMULATION, PRESETS, SCENARIO_FIELDS,
    CONTRACTILITY_MIN, CONTRACTILITY_MAX,
    EMAX_AT_MIN_CONTRACTILITY, EMAX_CONTRACTILITY_SPAN,
)
from .errors import InvalidInput, InvalidParameter

# scenario key -> Parameters attribute
_SCENARIO_TO_FIELD = {
    "hr": "heart_rate",
    "edv": "edv",
    "esv": "esv",
    "contr": "contractility",
    "svr": "vascular_resistance",
    "comp": "compliance",
    "rap": "venous_pressure",
    "Emax": "max_elastance",
    "Emin": "min_elastance",
    "V0": "unstressed_volume",
}


@dataclass(frozen=True)
class Parameters:
    """
    Caller-supplied model parameters, fixed for the duration of a run.

    Units: heart_rate [bpm], edv/esv/unstressed_volume [mL],
    vascular_resistance [dyn·s·cm^-5], compliance [mL/mmHg],
    venous_pressure [mmHg], max/min_elastance [mmHg/mL].
    `edv` seeds the initial ventricular volume; `esv` is informational.
    """
    heart_rate: float = 75.0
    edv: float = 120.0
    esv: float = 50.0
    contractility: float = 0.5
    vascular_resistance: float = 1200.0
    compliance: float = 1.5
    venous_pressure: float = 2.0
    max_elastance: float = 2.0
    min_elastance: float = 0.06
    unstressed_volume: float = 10.0

    @classmethod
    def from_scenario(cls, scenario: Mapping[str, Any]) -> "Parameters":
        """
        Build parameters from a scenario document.

        Parameters
        ----------
        scenario : mapping
            Object with keys hr, edv, esv, contr, svr, comp, rap, Emax, Emin, V0.
            Other keys are ignored.

        Returns
        -------
        Parameters
        """
        missing = [key for key in SCENARIO_FIELDS if key not in scenario]
        if missing:
            raise InvalidParameter(f"scenario is missing fields: {', '.join(missing)}")
        values = {}
        for key, name in _SCENARIO_TO_FIELD.items():
            try:
                values[name] = float(scenario[key])
            except (TypeError, ValueError) as exc:
                raise InvalidParameter(f"scenario field {key!r} is not numeric: {scenario[key]!r}") from exc
        return cls(**values)

    def to_scenario(self) -> Dict[str, float]:
        """Convert to the scenario document shape."""
        return {key: getattr(self, name) for key, name in _SCENARIO_TO_FIELD.items()}

    def replace(self, **changes) -> "Parameters":
        return _replace(self, **changes)

    def validate(self) -> None:
        """Raise InvalidParameter if any value is outside its domain."""
        for name, value in asdict(self).items():
            if not math.isfinite(value):
                raise InvalidParameter(f"{name} must be finite, got {value!r}")
        if self.heart_rate <= 0:
            raise InvalidParameter(f"heart_rate must be > 0, got {self.heart_rate}")
        if self.compliance <= 0:
            raise InvalidParameter(f"compliance must be > 0, got {self.compliance}")
        if self.vascular_resistance <= 0:
            raise InvalidParameter(
                f"vascular_resistance must be > 0, got {self.vascular_resistance}")
        if self.min_elastance < 0:
            raise InvalidParameter(f"min_elastance must be >= 0, got {self.min_elastance}")
        if self.max_elastance <= self.min_elastance:
            raise InvalidParameter(
                f"max_elastance ({self.max_elastance}) must exceed "
                f"min_elastance ({self.min_elastance})")
        if self.unstressed_volume < 0:
            raise InvalidParameter(
                f"unstressed_volume must be >= 0, got {self.unstressed_volume}")


@dataclass(frozen=True)
class RunOptions:
    """Integration resolution and beat count."""
    steps_per_beat: int = DEFAULT_SIMULATION["steps_per_beat"]
    beats: int = DEFAULT_SIMULATION["beats"]

    @property
    def total_steps(self) -> int:
        return self.steps_per_beat * self.beats

    def validate(self) -> None:
        for name in ("steps_per_beat", "beats"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidParameter(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise InvalidParameter(f"{name} must be > 0, got {value}")


def emax_from_contractility(contractility: float) -> float:
    """Linear map contractility 0.1..1.0 -> Emax 0.5..4.5 mmHg/mL (extrapolates outside)."""
    span = CONTRACTILITY_MAX - CONTRACTILITY_MIN
    return EMAX_AT_MIN_CONTRACTILITY + (contractility - CONTRACTILITY_MIN) / span * EMAX_CONTRACTILITY_SPAN


def normalize_parameters(parameters: Parameters, auto_elastance: bool = False) -> Parameters:
    """
    Apply caller-requested derivations before a run.

    With `auto_elastance`, max_elastance is replaced by the value mapped from
    contractility. The input record is left untouched.
    """
    if not auto_elastance:
        return parameters
    return parameters.replace(max_elastance=emax_from_contractility(parameters.contractility))


def load_preset(name: str) -> Parameters:
    """Return the parameters of a named preset."""
    try:
        scenario = PRESETS[name]
    except KeyError:
        raise InvalidParameter(
            f"unknown preset {name!r}; available: {', '.join(sorted(PRESETS))}") from None
    return Parameters.from_scenario(scenario)


@dataclass
class RunConfig:
    """Complete run configuration: scenario, derivation flag and run options."""
    scenario: Dict[str, float] = field(default_factory=lambda: dict(PRESETS["normal"]))
    auto_elastance: bool = False
    steps_per_beat: int = DEFAULT_SIMULATION["steps_per_beat"]
    beats: int = DEFAULT_SIMULATION["beats"]
    preset: Optional[str] = None

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "RunConfig":
        """
        Create configuration from dictionary.

        A `preset` entry provides the base scenario; `scenario` entries
        override individual fields of it.
        """
        config_dict = config_dict or {}
        if not isinstance(config_dict, dict):
            raise InvalidInput("run configuration must be a mapping")
        preset = config_dict.get("preset")
        scenario = dict(PRESETS["normal"])
        if preset is not None:
            scenario = load_preset(preset).to_scenario()
        overrides = config_dict.get("scenario") or {}
        simulation = config_dict.get("simulation") or {}
        if not isinstance(overrides, dict) or not isinstance(simulation, dict):
            raise InvalidInput("'scenario' and 'simulation' must be mappings")
        scenario.update(overrides)
        # no int() coercion: RunOptions.validate() rejects 2.5 or "many"
        options = RunOptions(
            steps_per_beat=simulation.get("steps_per_beat", DEFAULT_SIMULATION["steps_per_beat"]),
            beats=simulation.get("beats", DEFAULT_SIMULATION["beats"]),
        )
        options.validate()
        return cls(
            scenario=scenario,
            auto_elastance=bool(config_dict.get("auto_elastance", False)),
            steps_per_beat=options.steps_per_beat,
            beats=options.beats,
            preset=preset,
        )

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "RunConfig":
        """
        Load configuration from YAML file.

        Parameters
        ----------
        yaml_path : str or Path
            Path to YAML configuration file

        Returns
        -------
        RunConfig
            Configuration object
        """
        try:
            with open(yaml_path, 'r') as f:
                config_dict = yaml.safe_load(f)
        except OSError as exc:
            raise InvalidInput(f"Cannot read run configuration {yaml_path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise InvalidInput(f"Failed to parse run configuration {yaml_path}: {exc}") from exc
        return cls.from_dict(config_dict)

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "scenario": dict(self.scenario),
            "auto_elastance": self.auto_elastance,
            "simulation": {"steps_per_beat": self.steps_per_beat, "beats": self.beats},
        }
        if self.preset is not None:
            out["preset"] = self.preset
        return out

    def save(self, yaml_path: Union[str, Path]):
        """Save configuration to YAML file."""
        with open(yaml_path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, indent=2)

    def parameters(self) -> Parameters:
        """Scenario as normalized parameters, ready for the engine."""
        return normalize_parameters(Parameters.from_scenario(self.scenario), self.auto_elastance)

    def options(self) -> RunOptions:
        return RunOptions(steps_per_beat=self.steps_per_beat, beats=self.beats)
