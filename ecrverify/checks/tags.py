"""Tag checks."""

from typing import Dict, List, Literal, Optional

from .base import Expectation, PerResourceCheck, ValueRef, VerificationContext, as_dict


def _tags_match(expected: Dict[str, str], actual: Dict[str, str]) -> bool:
    if not actual:
        return False
    return all(actual.get(key) == value for key, value in expected.items())


class TagsCheck(PerResourceCheck):
    """Assert that a repository carries tags.

    The live tag set must be non-empty and, when ``expected`` is given, must
    contain every declared key with the declared value. The provider keys tags
    by ARN, so the sub-check is not applicable when the repository was not
    found.

    Attributes:
        expected: Optional declared map of tags that must be present

    Example:
        >>> TagsCheck()
        >>> TagsCheck(expected=ValueRef(source="declared", key="tags"))
    """

    kind: Literal["tags"] = "tags"
    expected: Optional[ValueRef] = None

    def declared_refs(self) -> List[ValueRef]:
        if self.expected is not None and self.expected.source == "declared":
            return [self.expected]
        return []

    def expectation_for(
        self, ctx: VerificationContext, index: int, identifier: str
    ) -> Expectation:
        expected: Dict[str, str] = {}
        if self.expected is not None and self.expected.source == "declared":
            expected = as_dict(ctx.resolve(self.expected))

        def actual() -> Dict[str, str]:
            if self.expected is not None and self.expected.source == "output":
                expectation.expected = as_dict(ctx.resolve(self.expected))
            state = ctx.require_live_state(identifier)
            return ctx.inspector.fetch_tags(state.arn)

        expectation = Expectation(
            name=self.sub_check_name(identifier),
            description=self.description or "Tags present",
            expected=expected,
            actual=actual,
            predicate=_tags_match,
        )
        return expectation
