"""
ecrverify - Post-deployment verification for container registry modules.

After an infrastructure module is applied, ecrverify reads the variables the
module was applied with and the outputs it exposed, queries the live ECR API,
and reports one pass/fail outcome per sub-check:

- Repository existence and identity
- Access and lifecycle policies
- Tags

Scenarios are declarative tables of checks run by a single ScenarioRunner.
"""

from .context import ProvisioningContext, StaticContext, TerraformContext
from .declared import DeclaredConfig, DeclaredConfigReader
from .errors import (
    ConfigFileError,
    ConfigVariableNotFound,
    EcrVerifyError,
    ExpectationMismatch,
    OutputNotFound,
    ProviderAPIError,
)
from .inspector import ResourceInspector, create_ecr_client
from .models import CheckOutcome, CheckStatus, LiveResourceState, Policy, ScenarioResult
from .runner import ScenarioRunner, assert_scenario_passed
from .scenarios import Scenario, get_scenario
from .settings import VerifySettings, get_settings, reload_settings

__version__ = "0.1.0"
__all__ = [
    "CheckOutcome",
    "CheckStatus",
    "ConfigFileError",
    "ConfigVariableNotFound",
    "DeclaredConfig",
    "DeclaredConfigReader",
    "EcrVerifyError",
    "ExpectationMismatch",
    "LiveResourceState",
    "OutputNotFound",
    "Policy",
    "ProviderAPIError",
    "ProvisioningContext",
    "ResourceInspector",
    "Scenario",
    "ScenarioResult",
    "ScenarioRunner",
    "StaticContext",
    "TerraformContext",
    "VerifySettings",
    "assert_scenario_passed",
    "create_ecr_client",
    "get_scenario",
    "get_settings",
    "reload_settings",
]
