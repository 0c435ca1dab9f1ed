from typing import Any, Dict, List, Optional, Union
from typeguard import typechecked
from pathlib import Path
import yaml

from arena.core.console import *
from arena.config.config_utils import recursive_update, validate_config

DEFAULTS_PATH = Path(__file__).with_name("game_config.yml")


@typechecked
class ConfigLoader:
    """
    A match configuration: one YAML match file, optionally layered with more.

    Typical use::

        config = ConfigLoader("config/skirmish.yml").apply_defaults().validated()
    """

    def __init__(self, input_path: Optional[Union[str, Path]] = None, data: Optional[Dict[str, Any]] = None):
        """
        Args:
            input_path: Match file to read.
            data: Already parsed configuration, used instead of a file.
        """
        self.input_path = Path(input_path) if input_path is not None else None
        self.config_data: Dict[str, Any] = {}

        if data is not None:
            self.config_data = data
        elif self.input_path is None:
            raise ValueError("ConfigLoader needs a match file or a config mapping")
        elif not self.input_path.exists():
            error(f"Match file '{self.input_path}' does not exist.")
            raise FileNotFoundError(f"Match file '{self.input_path}' not found")
        else:
            self.config_data = self._read_yaml(self.input_path)
            success(f"Loaded match file {self.input_path}")

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r") as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            error(f"Cannot parse '{path}': {e}")
            raise

    def merge(self, path: Union[str, Path], force: bool = True) -> "ConfigLoader":
        """
        Layer another YAML file over the current data.

        Args:
            path: File to merge in. A missing file is reported and skipped.
            force: The file wins on conflicts; when False it only fills keys
                that are missing or null.
        """
        path = Path(path)
        if not path.exists():
            warning(f"Config layer '{path}' does not exist, skipping")
            return self
        self.config_data = recursive_update(self.config_data, self._read_yaml(path), force=force)
        debug(f"Merged {path} (force={force})")
        return self

    def apply_defaults(self, defaults_path: Union[str, Path] = DEFAULTS_PATH) -> "ConfigLoader":
        """Fill every key the match file leaves out from the packaged defaults."""
        return self.merge(defaults_path, force=False)

    def validated(self) -> Dict[str, Any]:
        return validate_config(self.config_data)

    def get(self, *keys, default=None):
        """
        Nested lookup that never raises.

        Examples:
            loader.get('game', 'max_rounds')
            loader.get('teams', 'red', 'player')
        """
        node = self.config_data
        for key in keys:
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def sections(self) -> List[str]:
        return list(self.config_data)

    def __str__(self) -> str:
        source = self.input_path.name if self.input_path is not None else "<memory>"
        arena = self.config_data.get("arena") or {}
        teams = self.config_data.get("teams") or {}
        rosters = ", ".join(f"{name}={len((team or {}).get('robots') or [])} robots" for name, team in teams.items())
        return f"ConfigLoader({source}: {arena.get('width')}x{arena.get('height')}, {rosters or 'no teams'})"

    def __getitem__(self, key):
        return self.config_data[key]

    def __contains__(self, key):
        return key in self.config_data
