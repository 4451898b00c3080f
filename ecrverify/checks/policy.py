"""Access and lifecycle policy checks."""

from typing import List, Literal, Optional

from pydantic import field_validator

from ..models import Policy
from .base import Expectation, PerResourceCheck, ValueRef, VerificationContext, presence
from .utils import normalize, pick


class AccessPolicyCheck(PerResourceCheck):
    """Assert that a repository has an access policy attached.

    A repository without a policy (or a repository that does not exist) is
    reported as a failed sub-check with the value "absent"; provider errors
    fail the sub-check with the error message.

    Example:
        >>> AccessPolicyCheck()
    """

    kind: Literal["access_policy"] = "access_policy"

    def expectation_for(
        self, ctx: VerificationContext, index: int, identifier: str
    ) -> Expectation:
        return Expectation(
            name=self.sub_check_name(identifier),
            description=self.description or "Access policy attached",
            expected="present",
            actual=lambda: ctx.inspector.fetch_access_policy(identifier),
            predicate=lambda _, policy: policy is not None,
            render=presence,
        )


def max_image_count(policy: Optional[Policy]) -> Optional[int]:
    """Return the image count an ``imageCountMoreThan`` rule keeps, if any."""
    if policy is None:
        return None
    for rule in policy.document.get("rules", []):
        selection = rule.get("selection") or {}
        if selection.get("countType") == "imageCountMoreThan":
            return selection.get("countNumber")
    return None


class LifecyclePolicyCheck(PerResourceCheck):
    """Assert that a repository has a lifecycle policy.

    With ``max_images`` set, the policy must also keep exactly the declared
    number of images through an ``imageCountMoreThan`` rule.

    Attributes:
        max_images: Optional declared image count

    Example:
        >>> LifecyclePolicyCheck()
        >>> LifecyclePolicyCheck(
        ...     max_images=ValueRef(source="declared", key="lifecycle_policy_max_images"),
        ... )
    """

    kind: Literal["lifecycle_policy"] = "lifecycle_policy"
    max_images: Optional[ValueRef] = None

    @field_validator("max_images")
    @classmethod
    def _declared_only(cls, value: Optional[ValueRef]) -> Optional[ValueRef]:
        if value is not None and value.source != "declared":
            raise ValueError("max_images only supports declared references")
        return value

    def declared_refs(self) -> List[ValueRef]:
        return [self.max_images] if self.max_images is not None else []

    def expectation_for(
        self, ctx: VerificationContext, index: int, identifier: str
    ) -> Expectation:
        def fetch() -> Optional[Policy]:
            return ctx.inspector.fetch_lifecycle_policy(identifier)

        if self.max_images is None:
            return Expectation(
                name=self.sub_check_name(identifier),
                description=self.description or "Lifecycle policy set",
                expected="present",
                actual=fetch,
                predicate=lambda _, policy: policy is not None,
                render=presence,
            )

        expected = normalize(pick(ctx.resolve(self.max_images), index))
        return Expectation(
            name=self.sub_check_name(identifier),
            description=self.description or "Lifecycle policy image count",
            expected=expected,
            actual=fetch,
            predicate=lambda count, policy: (
                policy is not None and normalize(max_image_count(policy)) == count
            ),
            render=lambda policy: (
                presence(policy) if policy is None else normalize(max_image_count(policy))
            ),
        )
