"""Checks on values the provisioning tool exposes after apply."""

import re
from typing import List, Literal

from pydantic import field_validator

from .base import BaseCheck, Expectation, ValueRef, VerificationContext
from .utils import normalize


class OutputEqualsCheck(BaseCheck):
    """Assert that a provisioning output equals a declared value.

    This is the round trip from the variables file through apply: a value
    written as ``name = "registry-7421"`` must come back unchanged from the
    ``repository_name`` output.

    Attributes:
        output: Output name
        expected: Source of the expected value

    Example:
        >>> OutputEqualsCheck(
        ...     output="repository_name",
        ...     expected=ValueRef(source="declared", key="name"),
        ... )
    """

    kind: Literal["output_equals"] = "output_equals"
    output: str
    expected: ValueRef

    def declared_refs(self) -> List[ValueRef]:
        return [self.expected] if self.expected.source == "declared" else []

    def expectations(self, ctx: VerificationContext) -> List[Expectation]:
        expected = None
        if self.expected.source == "declared":
            expected = normalize(ctx.resolve(self.expected))

        def actual():
            if self.expected.source == "output":
                expectation.expected = normalize(ctx.resolve(self.expected))
            return normalize(ctx.provisioning.output(self.output))

        expectation = Expectation(
            name=f"output[{self.output}]",
            description=self.description or f"Output '{self.output}' matches {self.expected}",
            expected=expected,
            actual=actual,
        )
        return [expectation]


class OutputPatternCheck(BaseCheck):
    """Assert that a provisioning output fully matches a regular expression.

    Attributes:
        output: Output name
        pattern: Regular expression the whole value must match

    Example:
        >>> OutputPatternCheck(output="string", pattern=r"^[A-Za-z0-9]+$")
    """

    kind: Literal["output_pattern"] = "output_pattern"
    output: str
    pattern: str

    @field_validator("pattern")
    @classmethod
    def _compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"Invalid regular expression {value!r}: {e}") from e
        return value

    def expectations(self, ctx: VerificationContext) -> List[Expectation]:
        regex = re.compile(self.pattern)

        def matches(_: str, value: object) -> bool:
            return isinstance(value, str) and regex.fullmatch(value) is not None

        return [
            Expectation(
                name=f"output_pattern[{self.output}]",
                description=self.description or f"Output '{self.output}' matches /{self.pattern}/",
                expected=self.pattern,
                actual=lambda: ctx.provisioning.output(self.output),
                predicate=matches,
            )
        ]
