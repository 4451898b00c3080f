"""ecrverify checks module for comparing declared and live registry state.

Each check is a small pydantic descriptor; a scenario is an ordered list of
them. The ``Check`` union is discriminated on ``kind`` so scenario tables can
also be loaded from plain dictionaries.

Check Categories:
    - Existence: repository count matches the declared names
    - Identity: live name/ARN/URI and repository settings
    - Outputs: provisioning outputs match declared values or a pattern
    - Policy: access and lifecycle policies are attached
    - Tags: tags are present and include the declared ones

Example:
    >>> from ecrverify.checks import ExistenceCheck, AccessPolicyCheck, TagsCheck
    >>> checks = [ExistenceCheck(), AccessPolicyCheck(), TagsCheck()]
"""

from typing import Annotated, Union

from pydantic import Field

# Base classes
from .base import (
    BaseCheck,
    Expectation,
    NotApplicable,
    PerResourceCheck,
    ValueRef,
    VerificationContext,
)

# Existence checks
from .existence import ExistenceCheck

# Identity checks
from .identity import AttributeCheck, IdentityCheck

# Output checks
from .outputs import OutputEqualsCheck, OutputPatternCheck

# Policy checks
from .policy import AccessPolicyCheck, LifecyclePolicyCheck

# Tag checks
from .tags import TagsCheck

Check = Annotated[
    Union[
        ExistenceCheck,
        IdentityCheck,
        AttributeCheck,
        OutputEqualsCheck,
        OutputPatternCheck,
        AccessPolicyCheck,
        LifecyclePolicyCheck,
        TagsCheck,
    ],
    Field(discriminator="kind"),
]

__all__ = [
    # Base
    "BaseCheck",
    "Check",
    "Expectation",
    "NotApplicable",
    "PerResourceCheck",
    "ValueRef",
    "VerificationContext",
    # Existence
    "ExistenceCheck",
    # Identity
    "AttributeCheck",
    "IdentityCheck",
    # Outputs
    "OutputEqualsCheck",
    "OutputPatternCheck",
    # Policy
    "AccessPolicyCheck",
    "LifecyclePolicyCheck",
    # Tags
    "TagsCheck",
]
