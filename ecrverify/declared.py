"""
Declared-configuration reader for Terraform variable files.

Reads the per-scenario variables file used at apply time, located at
``{config_folder}/{scenario_name}/{config_file_name}``, and exposes its
values as a read-only snapshot.
"""

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

import hcl2

from .errors import ConfigFileError, ConfigVariableNotFound

logger = logging.getLogger(__name__)


def _unquote(value: Any) -> Any:
    """Strip the surrounding quotes some python-hcl2 releases keep on strings."""
    if isinstance(value, str) and len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    if isinstance(value, list):
        return [_unquote(item) for item in value]
    if isinstance(value, dict):
        return {_unquote(key): _unquote(item) for key, item in value.items()}
    return value


def _as_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class DeclaredConfig:
    """Immutable mapping of declared variable names to values for one scenario."""

    def __init__(self, values: Mapping[str, Any], source: Optional[str] = None):
        self._values = MappingProxyType(dict(values))
        self.source = source

    @property
    def values(self) -> Mapping[str, Any]:
        return self._values

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def get(self, name: str) -> Any:
        """Return the raw value of a variable.

        Raises:
            ConfigVariableNotFound: If the variable is not declared
        """
        if name not in self._values:
            raise ConfigVariableNotFound(name, self.source)
        return self._values[name]

    def get_str(self, name: str) -> str:
        return _as_string(self.get(name))

    def get_list(self, name: str) -> List[str]:
        """Return a variable as a list of strings; a scalar becomes one element."""
        value = self.get(name)
        if isinstance(value, (list, tuple)):
            return [_as_string(item) for item in value]
        return [_as_string(value)]


class DeclaredConfigReader:
    """
    Reader for the variables file of a single scenario.

    The file is parsed once on first access and the resulting snapshot is
    reused for every subsequent lookup made through this reader.
    """

    def __init__(
        self,
        config_folder: Union[str, Path],
        scenario_name: str,
        config_file_name: str,
    ):
        self.config_folder = Path(config_folder)
        self.scenario_name = scenario_name
        self.config_file_name = config_file_name
        self._config: Optional[DeclaredConfig] = None

    @property
    def path(self) -> Path:
        return self.config_folder / self.scenario_name / self.config_file_name

    def load(self) -> DeclaredConfig:
        """
        Parse the variables file.

        Returns:
            DeclaredConfig snapshot of every top-level variable

        Raises:
            ConfigFileError: If the file is missing or is not valid HCL
        """
        if self._config is not None:
            return self._config

        path = self.path
        if not path.is_file():
            raise ConfigFileError("Variables file not found", str(path))

        try:
            with open(path, "r", encoding="utf-8") as file:
                parsed: Dict[str, Any] = hcl2.load(file)
        except UnicodeDecodeError as e:
            raise ConfigFileError(f"File encoding error: {e}", str(path)) from e
        except Exception as e:
            # python-hcl2 surfaces lark parse errors directly
            raise ConfigFileError(f"Invalid variables file syntax: {e}", str(path)) from e

        values = {key: _unquote(value) for key, value in parsed.items()}
        logger.debug(f"Loaded {len(values)} declared variables from {path}")

        self._config = DeclaredConfig(values, source=str(path))
        return self._config

    def read(self, name: str) -> str:
        """Return a declared variable's value as a string.

        Raises:
            ConfigVariableNotFound: If the variable is not declared
        """
        return self.load().get_str(name)

    def read_value(self, name: str) -> Any:
        return self.load().get(name)

    def read_list(self, name: str) -> List[str]:
        return self.load().get_list(name)
