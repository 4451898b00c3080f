"""Existence and cardinality checks."""

from typing import List, Literal

from .base import BaseCheck, Expectation, VerificationContext


class ExistenceCheck(BaseCheck):
    """Assert that exactly the declared repositories exist.

    The expected count is the number of declared repository names; the actual
    count is what describe returned for those names.

    Example:
        >>> ExistenceCheck()
    """

    kind: Literal["existence"] = "existence"

    def expectations(self, ctx: VerificationContext) -> List[Expectation]:
        def actual() -> int:
            if ctx.describe_error is not None:
                raise ctx.describe_error
            return len(ctx.live)

        return [
            Expectation(
                name="existence",
                description=self.description or "Repository count",
                expected=len(ctx.identifiers),
                actual=actual,
            )
        ]
