"""
Scenario definitions - one declarative expectation table per module example.

A scenario names the declared variable holding the repository name(s) and
lists the checks to evaluate against those repositories. The scenario name
doubles as the default example folder under the config folder.
"""

import logging
from typing import Any, Dict, List, Mapping

from pydantic import BaseModel, Field

from .checks import (
    AccessPolicyCheck,
    AttributeCheck,
    Check,
    ExistenceCheck,
    IdentityCheck,
    LifecyclePolicyCheck,
    OutputEqualsCheck,
    OutputPatternCheck,
    TagsCheck,
    ValueRef,
)
from .declared import DeclaredConfig

logger = logging.getLogger(__name__)


class Scenario(BaseModel):
    """A named, ordered set of checks against one repository or a fixed batch.

    Attributes:
        name: Scenario name, also the default example folder name
        description: Human-readable summary
        identifiers_from: Declared variable holding the repository name or list
            of names
        checks: Checks evaluated in order
    """

    name: str
    description: str = ""
    identifiers_from: str = "name"
    checks: List[Check] = Field(default_factory=list)

    def identifiers(self, declared: DeclaredConfig) -> List[str]:
        """Resolve the repository names this scenario verifies.

        Repeated names are verified once, keeping the first occurrence.

        Raises:
            ConfigVariableNotFound: If ``identifiers_from`` is not declared
        """
        names = declared.get_list(self.identifiers_from)
        unique = list(dict.fromkeys(names))
        if len(unique) != len(names):
            logger.warning(
                f"'{self.identifiers_from}' repeats repository names; verifying {', '.join(unique)}"
            )
        return unique

    def declared_refs(self) -> List[ValueRef]:
        refs = [ValueRef(source="declared", key=self.identifiers_from)]
        for check in self.checks:
            refs.extend(check.declared_refs())
        return refs

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Scenario":
        return cls.model_validate(data)


ECR_COLLECTION = Scenario(
    name="ecr_collection",
    description="Single repository provisioned through the collection module",
    identifiers_from="name",
    checks=[
        ExistenceCheck(),
        OutputEqualsCheck(
            output="repository_name",
            expected=ValueRef(source="declared", key="name"),
        ),
        IdentityCheck(expected=ValueRef(source="output", key="repository_name")),
        IdentityCheck(
            expected=ValueRef(source="output", key="repository_arn"),
            attribute="arn",
        ),
        AttributeCheck(
            attribute="image_tag_mutability",
            expected=ValueRef(source="declared", key="image_tag_mutability"),
        ),
        AttributeCheck(
            attribute="scan_on_push",
            expected=ValueRef(source="declared", key="scan_on_push"),
        ),
        AccessPolicyCheck(),
        LifecyclePolicyCheck(
            max_images=ValueRef(source="declared", key="lifecycle_policy_max_images"),
        ),
        TagsCheck(expected=ValueRef(source="declared", key="tags")),
    ],
)

COMPOSABLE_COMPLETE = Scenario(
    name="composable_complete",
    description="Batch of repositories provisioned as composable resources",
    identifiers_from="repository_names",
    checks=[
        ExistenceCheck(),
        AccessPolicyCheck(),
        LifecyclePolicyCheck(),
        TagsCheck(expected=ValueRef(source="declared", key="tags")),
    ],
)


SKELETON = Scenario(
    name="skeleton",
    description="Repository exists and the module's string output is well formed",
    identifiers_from="name",
    checks=[
        ExistenceCheck(),
        OutputPatternCheck(output="string", pattern=r"^[A-Za-z0-9]+$"),
    ],
)

SCENARIOS: Dict[str, Scenario] = {
    scenario.name: scenario
    for scenario in (ECR_COLLECTION, COMPOSABLE_COMPLETE, SKELETON)
}


def get_scenario(name: str) -> Scenario:
    """Look up a built-in scenario by name.

    Raises:
        KeyError: If no scenario has that name
    """
    try:
        return SCENARIOS[name]
    except KeyError:
        available = ", ".join(sorted(SCENARIOS))
        raise KeyError(f"Unknown scenario '{name}' (available: {available})") from None


def list_scenarios() -> List[Scenario]:
    return list(SCENARIOS.values())


__all__ = [
    "COMPOSABLE_COMPLETE",
    "ECR_COLLECTION",
    "SCENARIOS",
    "SKELETON",
    "Scenario",
    "get_scenario",
    "list_scenarios",
]
