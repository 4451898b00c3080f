"""
Unit tests for check descriptors and lazy expectations.
"""

import pytest
from pydantic import ValidationError

from ecrverify.checks import (
    AccessPolicyCheck,
    AttributeCheck,
    ExistenceCheck,
    Expectation,
    IdentityCheck,
    LifecyclePolicyCheck,
    NotApplicable,
    OutputEqualsCheck,
    OutputPatternCheck,
    TagsCheck,
    ValueRef,
    VerificationContext,
)
from ecrverify.checks.policy import max_image_count
from ecrverify.context import StaticContext
from ecrverify.declared import DeclaredConfig
from ecrverify.errors import ProviderAPIError
from ecrverify.inspector import ResourceInspector
from ecrverify.models import CheckStatus, Policy
from ecrverify.scenarios import Scenario

from .conftest import LIFECYCLE_POLICY
from .fakes import FakeRegistryClient, client_error


def make_ctx(client, declared, outputs=None, identifiers=None, temp_dir="."):
    inspector = ResourceInspector(client)
    config = DeclaredConfig(declared)
    identifiers = identifiers or config.get_list("name")
    try:
        live = inspector.describe(identifiers)
        describe_error = None
    except ProviderAPIError as e:
        live, describe_error = [], e
    return VerificationContext(
        scenario="unit",
        identifiers=identifiers,
        declared=config,
        provisioning=StaticContext(temp_dir, "unit", "test.tfvars", outputs=outputs or {}),
        inspector=inspector,
        live=live,
        describe_error=describe_error,
    )


class TestExpectation:
    """Test evaluation of a single expectation."""

    def test_passes(self):
        outcome = Expectation(name="x", description="X", expected=1, actual=lambda: 1).evaluate()
        assert outcome.status == CheckStatus.PASSED

    def test_mismatch_reports_both_values(self):
        outcome = Expectation(
            name="existence", description="Repository count", expected=1, actual=lambda: 0
        ).evaluate()
        assert outcome.status == CheckStatus.FAILED
        assert outcome.message == "Repository count: expected 1, got 0"
        assert outcome.expected == 1
        assert outcome.actual == 0

    def test_actual_is_lazy(self):
        calls = []
        expectation = Expectation(
            name="x", description="X", expected=1, actual=lambda: calls.append(1) or 1
        )
        assert calls == []
        expectation.evaluate()
        assert calls == [1]

    def test_provider_error_is_recorded(self):
        def actual():
            raise ProviderAPIError("get_repository_policy", "denied", "AccessDeniedException")

        outcome = Expectation(name="x", description="Access policy", expected="present", actual=actual).evaluate()
        assert outcome.status == CheckStatus.FAILED
        assert "AccessDeniedException" in outcome.message

    def test_not_applicable(self):
        def actual():
            raise NotApplicable("repository 'x' was not found")

        outcome = Expectation(name="x", description="Tags", expected={}, actual=actual).evaluate()
        assert outcome.status == CheckStatus.NOT_APPLICABLE


class TestExistenceCheck:
    """Test repository count checks."""

    def test_counts_declared_names(self):
        client = FakeRegistryClient()
        client.add_repository("my-repo")
        ctx = make_ctx(client, {"name": ["my-repo", "my-other-repo"]})

        [outcome] = [e.evaluate() for e in ExistenceCheck().expectations(ctx)]

        assert outcome.status == CheckStatus.FAILED
        assert outcome.expected == 2
        assert outcome.actual == 1

    def test_describe_error_fails_existence(self):
        client = FakeRegistryClient()
        client.fail("describe_repositories", client_error("AccessDeniedException", "DescribeRepositories", "boom"))
        ctx = make_ctx(client, {"name": "ecr-test"})

        [outcome] = [e.evaluate() for e in ExistenceCheck().expectations(ctx)]

        assert outcome.status == CheckStatus.FAILED
        assert "boom" in outcome.message


class TestIdentityCheck:
    """Test identity comparisons."""

    def test_arn_matches_output(self):
        client = FakeRegistryClient()
        repository = client.add_repository("ecr-test")
        ctx = make_ctx(client, {"name": "ecr-test"}, outputs={"repository_arn": repository["repositoryArn"]})
        check = IdentityCheck(expected=ValueRef(source="output", key="repository_arn"), attribute="arn")

        [outcome] = [e.evaluate() for e in check.expectations(ctx)]

        assert outcome.name == "identity.arn[ecr-test]"
        assert outcome.status == CheckStatus.PASSED
        assert outcome.expected == repository["repositoryArn"]

    def test_arn_mismatch(self):
        client = FakeRegistryClient()
        client.add_repository("ecr-test")
        ctx = make_ctx(client, {"name": "ecr-test"}, outputs={"repository_arn": "arn:aws:ecr:eu-west-1:1:repository/x"})
        check = IdentityCheck(expected=ValueRef(source="output", key="repository_arn"), attribute="arn")

        [outcome] = [e.evaluate() for e in check.expectations(ctx)]

        assert outcome.status == CheckStatus.FAILED
        assert "eu-west-1" in outcome.message

    def test_missing_output_fails(self):
        client = FakeRegistryClient()
        client.add_repository("ecr-test")
        ctx = make_ctx(client, {"name": "ecr-test"})
        check = IdentityCheck(expected=ValueRef(source="output", key="repository_arn"), attribute="arn")

        [outcome] = [e.evaluate() for e in check.expectations(ctx)]

        assert outcome.status == CheckStatus.FAILED
        assert "repository_arn" in outcome.message

    def test_absent_repository_not_applicable(self):
        ctx = make_ctx(FakeRegistryClient(), {"name": "ecr-test"})
        check = IdentityCheck(expected=ValueRef(source="declared", key="name"))

        [outcome] = [e.evaluate() for e in check.expectations(ctx)]

        assert outcome.status == CheckStatus.NOT_APPLICABLE

    def test_list_expected_is_matched_by_position(self):
        client = FakeRegistryClient()
        client.add_repository("a")
        client.add_repository("b")
        ctx = make_ctx(client, {"name": ["a", "b"]})
        check = IdentityCheck(expected=ValueRef(source="declared", key="name"))

        outcomes = [e.evaluate() for e in check.expectations(ctx)]

        assert [o.name for o in outcomes] == ["identity.name[a]", "identity.name[b]"]
        assert all(o.passed for o in outcomes)


class TestAttributeCheck:
    """Test repository setting comparisons."""

    def test_declared_bool_matches_live(self):
        client = FakeRegistryClient()
        client.add_repository("ecr-test", scan_on_push=True)
        ctx = make_ctx(client, {"name": "ecr-test", "scan_on_push": True})
        check = AttributeCheck(attribute="scan_on_push", expected=ValueRef(key="scan_on_push"))

        [outcome] = [e.evaluate() for e in check.expectations(ctx)]

        assert outcome.status == CheckStatus.PASSED

    def test_literal_mismatch(self):
        client = FakeRegistryClient()
        client.add_repository("ecr-test", image_tag_mutability="MUTABLE")
        ctx = make_ctx(client, {"name": "ecr-test"})
        check = AttributeCheck(attribute="image_tag_mutability", value="IMMUTABLE")

        [outcome] = [e.evaluate() for e in check.expectations(ctx)]

        assert outcome.status == CheckStatus.FAILED
        assert "expected 'IMMUTABLE', got 'MUTABLE'" in outcome.message

    def test_requires_exactly_one_source(self):
        with pytest.raises(ValidationError):
            AttributeCheck(attribute="scan_on_push")
        with pytest.raises(ValidationError):
            AttributeCheck(attribute="scan_on_push", value=True, expected=ValueRef(key="scan_on_push"))


class TestOutputChecks:
    """Test checks on provisioning outputs."""

    def test_round_trip_declared_name_to_output(self):
        ctx = make_ctx(
            FakeRegistryClient(),
            {"name": "registry-7421"},
            outputs={"repository_name": "registry-7421"},
        )
        check = OutputEqualsCheck(output="repository_name", expected=ValueRef(key="name"))

        [outcome] = [e.evaluate() for e in check.expectations(ctx)]

        assert outcome.name == "output[repository_name]"
        assert outcome.status == CheckStatus.PASSED

    def test_output_pattern(self):
        ctx = make_ctx(FakeRegistryClient(), {"name": "x"}, outputs={"string": "Abc123"})
        check = OutputPatternCheck(output="string", pattern=r"^[A-Za-z0-9]+$")
        [outcome] = [e.evaluate() for e in check.expectations(ctx)]
        assert outcome.passed

    def test_output_pattern_mismatch(self):
        ctx = make_ctx(FakeRegistryClient(), {"name": "x"}, outputs={"string": "not ok!"})
        check = OutputPatternCheck(output="string", pattern=r"^[A-Za-z0-9]+$")
        [outcome] = [e.evaluate() for e in check.expectations(ctx)]
        assert outcome.failed

    def test_invalid_pattern_rejected_when_loaded(self):
        with pytest.raises(ValidationError):
            Scenario.from_dict(
                {"name": "bad", "checks": [{"kind": "output_pattern", "output": "string", "pattern": "[a-"}]}
            )


class TestPolicyAndTagChecks:
    """Test policy presence and tag checks."""

    def test_absent_policy_fails_as_data(self):
        client = FakeRegistryClient()
        client.add_repository("ecr-test")
        ctx = make_ctx(client, {"name": "ecr-test"})

        [outcome] = [e.evaluate() for e in AccessPolicyCheck().expectations(ctx)]

        assert outcome.status == CheckStatus.FAILED
        assert outcome.actual == "absent"
        assert outcome.name == "access_policy[ecr-test]"

    def test_declared_tags_subset(self):
        client = FakeRegistryClient()
        client.add_repository("ecr-test", tags={"provisioner": "terraform", "extra": "1"})
        ctx = make_ctx(client, {"name": "ecr-test", "tags": {"provisioner": "terraform"}})
        check = TagsCheck(expected=ValueRef(key="tags"))

        [outcome] = [e.evaluate() for e in check.expectations(ctx)]

        assert outcome.passed

    def test_declared_tag_value_differs(self):
        client = FakeRegistryClient()
        client.add_repository("ecr-test", tags={"provisioner": "manual"})
        ctx = make_ctx(client, {"name": "ecr-test", "tags": {"provisioner": "terraform"}})
        check = TagsCheck(expected=ValueRef(key="tags"))

        [outcome] = [e.evaluate() for e in check.expectations(ctx)]

        assert outcome.failed

    def test_empty_tags_fail(self):
        client = FakeRegistryClient()
        client.add_repository("ecr-test", tags={})
        ctx = make_ctx(client, {"name": "ecr-test"})

        [outcome] = [e.evaluate() for e in TagsCheck().expectations(ctx)]

        assert outcome.failed

    def test_tags_not_applicable_without_repository(self):
        ctx = make_ctx(FakeRegistryClient(), {"name": "ecr-test"})
        [outcome] = [e.evaluate() for e in TagsCheck().expectations(ctx)]
        assert outcome.status == CheckStatus.NOT_APPLICABLE

    def test_lifecycle_image_count_matches_declared(self):
        client = FakeRegistryClient()
        client.add_repository("ecr-test", lifecycle=LIFECYCLE_POLICY)
        ctx = make_ctx(client, {"name": "ecr-test", "lifecycle_policy_max_images": 30})
        check = LifecyclePolicyCheck(max_images=ValueRef(key="lifecycle_policy_max_images"))

        [outcome] = [e.evaluate() for e in check.expectations(ctx)]

        assert outcome.passed
        assert outcome.actual == "30"

    def test_lifecycle_image_count_differs(self):
        client = FakeRegistryClient()
        client.add_repository("ecr-test", lifecycle=LIFECYCLE_POLICY)
        ctx = make_ctx(client, {"name": "ecr-test", "lifecycle_policy_max_images": 50})
        check = LifecyclePolicyCheck(max_images=ValueRef(key="lifecycle_policy_max_images"))

        [outcome] = [e.evaluate() for e in check.expectations(ctx)]

        assert outcome.failed
        assert outcome.message == "Lifecycle policy image count: expected '50', got '30'"

    def test_lifecycle_image_count_without_policy(self):
        client = FakeRegistryClient()
        client.add_repository("ecr-test")
        ctx = make_ctx(client, {"name": "ecr-test", "lifecycle_policy_max_images": 30})
        check = LifecyclePolicyCheck(max_images=ValueRef(key="lifecycle_policy_max_images"))

        [outcome] = [e.evaluate() for e in check.expectations(ctx)]

        assert outcome.failed
        assert outcome.actual == "absent"

    def test_max_image_count_reads_count_rule(self):
        assert max_image_count(Policy(repository_name="r", text=LIFECYCLE_POLICY)) == 30
        assert max_image_count(Policy(repository_name="r", text='{"rules": []}')) is None
        assert max_image_count(None) is None


class TestScenarioTables:
    """Test loading checks from plain data."""

    def test_from_dict_uses_kind_discriminator(self):
        scenario = Scenario.from_dict(
            {
                "name": "custom",
                "identifiers_from": "repository_names",
                "checks": [
                    {"kind": "existence"},
                    {"kind": "identity", "expected": {"source": "output", "key": "arn"}, "attribute": "arn"},
                    {"kind": "tags", "expected": {"key": "tags"}},
                ],
            }
        )
        assert [type(check) for check in scenario.checks] == [ExistenceCheck, IdentityCheck, TagsCheck]

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            Scenario.from_dict({"name": "bad", "checks": [{"kind": "nonsense"}]})

    def test_declared_refs_include_identifiers(self):
        scenario = Scenario(
            name="s",
            identifiers_from="repository_names",
            checks=[TagsCheck(expected=ValueRef(key="tags")), OutputEqualsCheck(output="o", expected=ValueRef(key="name"))],
        )
        assert [ref.key for ref in scenario.declared_refs()] == ["repository_names", "tags", "name"]
