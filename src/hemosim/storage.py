"""
Scenario files: JSON import/export and a single saved scenario kept on disk.
"""
from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Optional, Tuple, Union

from .config import Parameters, load_preset
from .constants import SCENARIO_FIELDS
from .errors import InvalidInput

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _read_json(path: PathLike) -> dict:
    try:
        obj = json.loads(Path(path).read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidInput(f"Failed to parse file {path}: {exc}") from exc
    except OSError as exc:
        raise InvalidInput(f"Cannot read scenario file {path}: {exc}") from exc
    if not isinstance(obj, dict):
        raise InvalidInput(f"Invalid scenario JSON in {path}: expected an object")
    return obj


def export_scenario(params: Parameters, path: PathLike, auto_elastance: bool = False) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    doc = params.to_scenario()
    doc["autoEsv"] = bool(auto_elastance)
    path.write_text(json.dumps(doc, indent=2), encoding="utf-8")
    logger.info("scenario exported to %s", path)
    return path


def import_scenario(path: PathLike, base: Optional[Parameters] = None) -> Tuple[Parameters, bool]:
    """
    Read a scenario file.

    Fields missing (or falsy) in the file keep the value of `base`
    (the "normal" preset by default). A document without a heart rate is rejected.

    Returns
    -------
    (Parameters, bool)
        The parameters and the stored auto-elastance flag.
    """
    obj = _read_json(path)
    if not obj.get("hr"):
        raise InvalidInput(f"Invalid scenario JSON in {path}: missing 'hr'")
    scenario = (base if base is not None else load_preset("normal")).to_scenario()
    for key in SCENARIO_FIELDS:
        if obj.get(key):
            scenario[key] = obj[key]
    params = Parameters.from_scenario(scenario)
    logger.info("scenario imported from %s", path)
    return params, bool(obj.get("autoEsv", False))


def default_store_root() -> Path:
    return Path(os.environ.get("HEMOSIM_HOME", Path.home() / ".hemosim"))


class ScenarioStore:
    """One locally saved scenario (save / load last)."""
    filename = "saved_scenario.json"

    def __init__(self, root: Optional[PathLike] = None):
        self.root = Path(root) if root is not None else default_store_root()

    @property
    def path(self) -> Path:
        return self.root / self.filename

    def save(self, params: Parameters, auto_elastance: bool = False) -> Path:
        return export_scenario(params, self.path, auto_elastance)

    def load(self) -> Tuple[Parameters, bool]:
        if not self.path.exists():
            raise InvalidInput(f"No saved scenario found in {self.root}")
        obj = _read_json(self.path)
        params = Parameters.from_scenario(obj)
        logger.info("saved scenario loaded from %s", self.path)
        return params, bool(obj.get("autoEsv", False))
