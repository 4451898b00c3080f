"""
Scenario Runner - evaluates one scenario against live provider state.

Pipeline: Init → FetchDeclared → FetchLive → Evaluate (all checks) → Report

Only a missing declared variable (or an unreadable variables file) stops a
scenario; every other failure is recorded on its sub-check and the remaining
sub-checks still run.
"""

import logging
from typing import List, Optional, Union

from .checks import VerificationContext
from .context import ProvisioningContext
from .declared import DeclaredConfigReader
from .errors import ProviderAPIError
from .inspector import RegistryClient, ResourceInspector
from .models import CheckOutcome, CheckStatus, LiveResourceState, ScenarioResult
from .scenarios import Scenario, get_scenario
from .settings import get_settings

logger = logging.getLogger(__name__)


class ScenarioRunner:
    """Runs scenarios with a pre-authenticated registry client."""

    def __init__(
        self,
        client: RegistryClient,
        max_retries: Optional[int] = None,
        retry_base_delay: Optional[float] = None,
    ):
        """
        Initialize the runner.

        Args:
            client: ECR client (or fake) shared by all invocations
            max_retries: Provider retries (overrides settings)
            retry_base_delay: Backoff base delay in seconds (overrides settings)
        """
        settings = get_settings()
        self.client = client
        self.max_retries = settings.api_max_retries if max_retries is None else max_retries
        self.retry_base_delay = (
            settings.api_retry_base_delay if retry_base_delay is None else retry_base_delay
        )

    def _new_inspector(self) -> ResourceInspector:
        return ResourceInspector(
            self.client,
            max_retries=self.max_retries,
            retry_base_delay=self.retry_base_delay,
        )

    def run(
        self, scenario: Union[Scenario, str], context: ProvisioningContext
    ) -> ScenarioResult:
        """
        Run every check of a scenario and report each sub-check.

        Args:
            scenario: Scenario or built-in scenario name
            context: Provisioning context scoped to this invocation

        Returns:
            ScenarioResult with one outcome per sub-check

        Raises:
            ConfigVariableNotFound: If a declared variable the scenario needs
                is missing
            ConfigFileError: If the variables file is missing or invalid
        """
        if isinstance(scenario, str):
            scenario = get_scenario(scenario)

        logger.info(
            f"Starting scenario '{scenario.name}' "
            f"({context.config_folder}/{context.scenario_name}/{context.config_file_name})"
        )

        # 1. Init: everything below is scoped to this invocation
        reader = DeclaredConfigReader(
            context.config_folder, context.scenario_name, context.config_file_name
        )
        inspector = self._new_inspector()

        # 2. FetchDeclared: resolve every declared value up front
        declared = reader.load()
        for ref in scenario.declared_refs():
            declared.get(ref.key)
        identifiers = scenario.identifiers(declared)
        logger.info(f"Declared repositories: {', '.join(identifiers) or '(none)'}")

        # 3. FetchLive
        live: List[LiveResourceState] = []
        describe_error: Optional[ProviderAPIError] = None
        try:
            live = inspector.describe(identifiers)
            logger.info(f"Found {len(live)} of {len(identifiers)} repositories")
        except ProviderAPIError as e:
            describe_error = e
            logger.error(f"Could not describe repositories: {e}")

        ctx = VerificationContext(
            scenario=scenario.name,
            identifiers=identifiers,
            declared=declared,
            provisioning=context,
            inspector=inspector,
            live=live,
            describe_error=describe_error,
        )

        # 4. Evaluate
        outcomes: List[CheckOutcome] = []
        for check in scenario.checks:
            for expectation in check.expectations(ctx):
                logger.info(f"  Checking: {expectation.name}")
                outcome = expectation.evaluate()
                _log_outcome(outcome)
                outcomes.append(outcome)

        # 5. Report
        result = ScenarioResult(
            scenario=scenario.name, identifiers=identifiers, outcomes=outcomes
        )
        summary = result.summary()
        logger.info(
            f"Scenario '{scenario.name}' {'passed' if result.passed else 'failed'}: "
            f"{summary['passed']}/{summary['total']} sub-checks passed"
        )
        return result


def _log_outcome(outcome: CheckOutcome) -> None:
    if outcome.status == CheckStatus.PASSED:
        logger.info(f"  ✓ Passed: {outcome.name}")
    elif outcome.status == CheckStatus.NOT_APPLICABLE:
        logger.warning(f"  - Not applicable: {outcome.name} - {outcome.message}")
    else:
        logger.error(f"  ✗ Failed: {outcome.name} - {outcome.message}")


def assert_scenario_passed(result: ScenarioResult) -> None:
    """Raise AssertionError listing every failed sub-check.

    Intended for use inside pytest so the whole report shows on failure.
    """
    if result.passed:
        return

    lines = [f"Scenario '{result.scenario}' failed:"]
    for outcome in result.outcomes:
        lines.append(f"  [{outcome.status.value}] {outcome.name}: {outcome.message}")
    raise AssertionError("\n".join(lines))
