"""Base check classes for ecrverify."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel

from ..errors import ExpectationMismatch, OutputNotFound, ProviderAPIError, ProvisioningError
from ..models import CheckOutcome, CheckStatus, LiveResourceState

if TYPE_CHECKING:
    from ..context import ProvisioningContext
    from ..declared import DeclaredConfig
    from ..inspector import ResourceInspector


class NotApplicable(Exception):
    """Raised by an actual-value accessor when the check cannot apply."""
    pass


class ValueRef(BaseModel):
    """Where an expected value comes from.

    Attributes:
        source: "declared" for the scenario variables file, "output" for
            provisioning outputs
        key: Variable or output name

    Example:
        >>> ValueRef(source="declared", key="name")
        >>> ValueRef(source="output", key="repository_arn")
    """

    source: Literal["declared", "output"] = "declared"
    key: str

    def __str__(self) -> str:
        return f"{self.source}.{self.key}"


@dataclass
class VerificationContext:
    """Everything a check needs while a scenario is being evaluated.

    Built fresh by the runner for each scenario invocation.
    """

    scenario: str
    identifiers: List[str]
    declared: "DeclaredConfig"
    provisioning: "ProvisioningContext"
    inspector: "ResourceInspector"
    live: List[LiveResourceState] = field(default_factory=list)
    describe_error: Optional[ProviderAPIError] = None

    def live_state(self, identifier: str) -> Optional[LiveResourceState]:
        for state in self.live:
            if state.name == identifier:
                return state
        return None

    def require_live_state(self, identifier: str) -> LiveResourceState:
        state = self.live_state(identifier)
        if state is None:
            if self.describe_error is not None:
                raise self.describe_error
            raise NotApplicable(f"repository '{identifier}' was not found")
        return state

    def resolve(self, ref: ValueRef) -> Any:
        """Resolve a reference; outputs are queried on demand."""
        if ref.source == "declared":
            return self.declared.get(ref.key)
        return self.provisioning.output(ref.key)


def _equals(expected: Any, actual: Any) -> bool:
    return expected == actual


@dataclass
class Expectation:
    """One lazily evaluated comparison.

    The actual value is only fetched when ``evaluate`` runs, so checks on a
    sub-resource never query the provider before the scenario reaches them.
    """

    name: str
    description: str
    expected: Any
    actual: Callable[[], Any]
    predicate: Callable[[Any, Any], bool] = _equals
    render: Optional[Callable[[Any], Any]] = None

    def verify(self, actual: Any) -> None:
        """Raise ExpectationMismatch unless the predicate holds."""
        if not self.predicate(self.expected, actual):
            shown = self.render(actual) if self.render else actual
            raise ExpectationMismatch(self.description, self.expected, shown)

    def evaluate(self) -> CheckOutcome:
        """Fetch the actual value and compare, never raising for data problems."""
        try:
            actual = self.actual()
        except NotApplicable as e:
            return CheckOutcome(
                name=self.name,
                status=CheckStatus.NOT_APPLICABLE,
                message=f"{self.description}: not applicable, {e}",
                expected=self.expected,
            )
        except (ProviderAPIError, OutputNotFound, ProvisioningError) as e:
            return CheckOutcome(
                name=self.name,
                status=CheckStatus.FAILED,
                message=f"{self.description}: {e}",
                expected=self.expected,
            )

        shown = self.render(actual) if self.render else actual
        try:
            self.verify(actual)
        except ExpectationMismatch as e:
            return CheckOutcome(
                name=self.name,
                status=CheckStatus.FAILED,
                message=str(e),
                expected=self.expected,
                actual=shown,
            )

        return CheckOutcome(
            name=self.name,
            status=CheckStatus.PASSED,
            message=self.description,
            expected=self.expected,
            actual=shown,
        )


class BaseCheck(BaseModel):
    """Base class for all check descriptors.

    A check is pure data; ``expectations`` turns it into the list of
    sub-checks to run for one scenario invocation.

    Attributes:
        kind: Discriminator naming the check type
        description: Optional human-readable description overriding the default
    """

    kind: str
    description: Optional[str] = None

    def declared_refs(self) -> List[ValueRef]:
        """Declared values this check needs before anything live is fetched."""
        return []

    def expectations(self, ctx: VerificationContext) -> List[Expectation]:
        """Build the sub-checks for this scenario invocation.

        Args:
            ctx: The scenario's verification context

        Returns:
            Expectations in report order
        """
        raise NotImplementedError("Subclasses must implement expectations()")


class PerResourceCheck(BaseCheck):
    """A check that yields one sub-check per declared repository."""

    def label(self) -> str:
        return self.kind

    def expectations(self, ctx: VerificationContext) -> List[Expectation]:
        return [
            self.expectation_for(ctx, index, identifier)
            for index, identifier in enumerate(ctx.identifiers)
        ]

    def expectation_for(
        self, ctx: VerificationContext, index: int, identifier: str
    ) -> Expectation:
        raise NotImplementedError("Subclasses must implement expectation_for()")

    def sub_check_name(self, identifier: str) -> str:
        return f"{self.label()}[{identifier}]"


def presence(value: Any) -> str:
    return "absent" if value is None else "present"


def as_dict(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): str(item) for key, item in value.items()}
