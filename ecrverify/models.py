"""
Pydantic models shared across the verification pipeline.

- LiveResourceState / Policy: the provider's view of a repository
- CheckOutcome / ScenarioResult: per-sub-check and per-scenario reports
"""

import json
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Live state
# =============================================================================

class Policy(BaseModel):
    """A policy document attached to a repository."""

    model_config = ConfigDict(frozen=True)

    repository_name: str
    text: str

    @property
    def document(self) -> Dict[str, Any]:
        """Parsed JSON document, or an empty dict if the text is not JSON."""
        try:
            parsed = json.loads(self.text)
        except ValueError:
            return {}
        return parsed if isinstance(parsed, dict) else {}


class LiveResourceState(BaseModel):
    """Identity and settings of one repository as reported by describe."""

    model_config = ConfigDict(frozen=True)

    name: str
    arn: str
    uri: str = ""
    registry_id: str = ""
    image_tag_mutability: Optional[str] = None
    scan_on_push: Optional[bool] = None
    encryption_type: Optional[str] = None

    @classmethod
    def from_api(cls, repository: Dict[str, Any]) -> "LiveResourceState":
        """Build from one entry of a DescribeRepositories response."""
        scanning = repository.get("imageScanningConfiguration") or {}
        encryption = repository.get("encryptionConfiguration") or {}
        return cls(
            name=repository["repositoryName"],
            arn=repository["repositoryArn"],
            uri=repository.get("repositoryUri", ""),
            registry_id=repository.get("registryId", ""),
            image_tag_mutability=repository.get("imageTagMutability"),
            scan_on_push=scanning.get("scanOnPush"),
            encryption_type=encryption.get("encryptionType"),
        )


# =============================================================================
# Reports
# =============================================================================

class CheckStatus(str, Enum):
    """Outcome of a single sub-check."""
    PASSED = "passed"
    FAILED = "failed"
    NOT_APPLICABLE = "not_applicable"


class CheckOutcome(BaseModel):
    """Result of evaluating one expectation."""

    name: str
    status: CheckStatus
    message: str = ""
    expected: Any = None
    actual: Any = None

    @property
    def passed(self) -> bool:
        return self.status == CheckStatus.PASSED

    @property
    def failed(self) -> bool:
        return self.status == CheckStatus.FAILED


class ScenarioResult(BaseModel):
    """Ordered sub-check outcomes for one scenario invocation.

    The scenario fails if any sub-check failed. Outcomes marked
    not-applicable do not fail the scenario on their own.
    """

    scenario: str
    identifiers: List[str] = Field(default_factory=list)
    outcomes: List[CheckOutcome] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not any(outcome.failed for outcome in self.outcomes)

    @property
    def failures(self) -> List[CheckOutcome]:
        return [outcome for outcome in self.outcomes if outcome.failed]

    def count(self, status: CheckStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    def get(self, name: str) -> Optional[CheckOutcome]:
        """Look up a sub-check outcome by name."""
        for outcome in self.outcomes:
            if outcome.name == name:
                return outcome
        return None

    def summary(self) -> Dict[str, Any]:
        return {
            "scenario": self.scenario,
            "success": self.passed,
            "total": len(self.outcomes),
            "passed": self.count(CheckStatus.PASSED),
            "failed": self.count(CheckStatus.FAILED),
            "not_applicable": self.count(CheckStatus.NOT_APPLICABLE),
        }

    def to_json(self) -> str:
        """Serialize summary and outcomes to JSON."""
        payload = self.summary()
        payload["outcomes"] = [outcome.model_dump(mode="json") for outcome in self.outcomes]
        return json.dumps(payload, indent=2, default=str)
