"""
Provisioning context - read-only access to what the provisioning tool knows.

A context supplies the folder/scenario/file-name triple that locates the
scenario's variables file, plus accessors for declared variables and for
outputs exposed after a successful apply. The verification core never
provisions anything through it.
"""

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol, Union, runtime_checkable

from .declared import DeclaredConfigReader
from .errors import OutputNotFound, ProvisioningError

logger = logging.getLogger(__name__)


@runtime_checkable
class ProvisioningContext(Protocol):
    """What the verification core needs from the test orchestration layer."""

    config_folder: Path
    scenario_name: str
    config_file_name: str

    def output(self, name: str) -> Any:
        ...

    def variable(self, name: str) -> str:
        ...


class _ContextBase:
    """Shared triple handling and variable lookup."""

    def __init__(
        self,
        config_folder: Union[str, Path],
        scenario_name: str,
        config_file_name: str,
    ):
        self.config_folder = Path(config_folder)
        self.scenario_name = scenario_name
        self.config_file_name = config_file_name

    @property
    def scenario_dir(self) -> Path:
        return self.config_folder / self.scenario_name

    def reader(self) -> DeclaredConfigReader:
        """Create a fresh reader scoped to this context's scenario."""
        return DeclaredConfigReader(
            self.config_folder, self.scenario_name, self.config_file_name
        )

    def variable(self, name: str) -> str:
        return self.reader().read(name)


class StaticContext(_ContextBase):
    """Context whose outputs are supplied up front by the caller.

    Used when an outer driver has already collected the outputs, and in tests.
    """

    def __init__(
        self,
        config_folder: Union[str, Path],
        scenario_name: str,
        config_file_name: str,
        outputs: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(config_folder, scenario_name, config_file_name)
        self._outputs = dict(outputs or {})

    def output(self, name: str) -> Any:
        if name not in self._outputs:
            raise OutputNotFound(name)
        return self._outputs[name]


class TerraformContext(_ContextBase):
    """Context that reads outputs from Terraform state in the scenario folder.

    Each lookup runs ``terraform output -json``; Terraform reads its own state
    so repeated queries are idempotent.
    """

    def __init__(
        self,
        config_folder: Union[str, Path],
        scenario_name: str,
        config_file_name: str,
        terraform_binary: str = "terraform",
    ):
        super().__init__(config_folder, scenario_name, config_file_name)
        self.terraform_binary = terraform_binary

    def outputs(self) -> Dict[str, Any]:
        """Return every output value keyed by name.

        Raises:
            ProvisioningError: If terraform cannot be run or reports an error
        """
        cmd = [self.terraform_binary, "output", "-json"]
        logger.debug(f"Reading outputs: {' '.join(cmd)} (cwd={self.scenario_dir})")

        try:
            process = subprocess.run(
                cmd,
                cwd=self.scenario_dir,
                capture_output=True,
                text=True,
                check=False,
            )
        except (FileNotFoundError, NotADirectoryError) as e:
            raise ProvisioningError(f"Cannot run {self.terraform_binary}: {e}") from e

        if process.returncode != 0:
            raise ProvisioningError(
                f"terraform output failed with exit code {process.returncode}: "
                f"{process.stderr.strip()}"
            )

        try:
            raw = json.loads(process.stdout or "{}")
        except json.JSONDecodeError as e:
            raise ProvisioningError(f"terraform output is not valid JSON: {e}") from e

        return {
            name: entry.get("value") if isinstance(entry, dict) else entry
            for name, entry in raw.items()
        }

    def output(self, name: str) -> Any:
        outputs = self.outputs()
        if name not in outputs:
            raise OutputNotFound(name)
        return outputs[name]
