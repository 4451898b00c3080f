"""Identity and repository-setting checks against live state."""

from typing import Any, List, Literal, Optional

from pydantic import model_validator

from .base import Expectation, PerResourceCheck, ValueRef, VerificationContext
from .utils import normalize, pick


class IdentityCheck(PerResourceCheck):
    """Assert that a live identity attribute equals a declared or output value.

    When the expected value is a list it is matched to the declared
    repositories by position.

    Attributes:
        expected: Source of the expected value
        attribute: Live identity attribute to compare ("name", "arn" or "uri")

    Example:
        >>> # Repository name matches the declared variable
        >>> IdentityCheck(expected=ValueRef(source="declared", key="name"))
        >>>
        >>> # Repository ARN matches the module output
        >>> IdentityCheck(
        ...     expected=ValueRef(source="output", key="repository_arn"),
        ...     attribute="arn",
        ... )
    """

    kind: Literal["identity"] = "identity"
    expected: ValueRef
    attribute: Literal["name", "arn", "uri"] = "name"

    def label(self) -> str:
        return f"identity.{self.attribute}"

    def declared_refs(self) -> List[ValueRef]:
        return [self.expected] if self.expected.source == "declared" else []

    def expectation_for(
        self, ctx: VerificationContext, index: int, identifier: str
    ) -> Expectation:
        expected = None
        if self.expected.source == "declared":
            expected = pick(ctx.resolve(self.expected), index)

        def actual() -> Any:
            if self.expected.source == "output":
                # Outputs are read only when the sub-check runs
                expectation.expected = normalize(pick(ctx.resolve(self.expected), index))
            return getattr(ctx.require_live_state(identifier), self.attribute)

        expectation = Expectation(
            name=self.sub_check_name(identifier),
            description=self.description or f"Repository {self.attribute} matches {self.expected}",
            expected=normalize(expected),
            actual=actual,
        )
        return expectation


class AttributeCheck(PerResourceCheck):
    """Assert that a live repository setting has the declared value.

    Exactly one of ``value`` (a literal) or ``expected`` (a reference) must be
    given.

    Attributes:
        attribute: Repository setting reported by describe
        value: Literal expected value
        expected: Source of the expected value

    Example:
        >>> AttributeCheck(attribute="image_tag_mutability", value="IMMUTABLE")
        >>> AttributeCheck(
        ...     attribute="scan_on_push",
        ...     expected=ValueRef(source="declared", key="scan_on_push"),
        ... )
    """

    kind: Literal["attribute"] = "attribute"
    attribute: Literal["image_tag_mutability", "scan_on_push", "encryption_type"]
    value: Optional[Any] = None
    expected: Optional[ValueRef] = None

    @model_validator(mode="after")
    def _one_source(self) -> "AttributeCheck":
        if (self.value is None) == (self.expected is None):
            raise ValueError("Specify exactly one of 'value' or 'expected'")
        if self.expected is not None and self.expected.source != "declared":
            raise ValueError("AttributeCheck only supports declared references")
        return self

    def label(self) -> str:
        return f"attribute.{self.attribute}"

    def declared_refs(self) -> List[ValueRef]:
        return [self.expected] if self.expected is not None else []

    def expectation_for(
        self, ctx: VerificationContext, index: int, identifier: str
    ) -> Expectation:
        if self.expected is not None:
            expected = pick(ctx.resolve(self.expected), index)
        else:
            expected = self.value

        return Expectation(
            name=self.sub_check_name(identifier),
            description=self.description or f"Repository {self.attribute}",
            expected=normalize(expected),
            actual=lambda: normalize(
                getattr(ctx.require_live_state(identifier), self.attribute)
            ),
        )
