"""
Pytest configuration and fixtures for ecrverify tests.
"""

import os
import tempfile
from pathlib import Path

import boto3
import pytest
from moto import mock_aws

from ecrverify.settings import reload_settings

from .fakes import FakeRegistryClient

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"

LIFECYCLE_POLICY = (
    '{"rules": [{"rulePriority": 1, "description": "Keep last 30 images", '
    '"selection": {"tagStatus": "any", "countType": "imageCountMoreThan", "countNumber": 30}, '
    '"action": {"type": "expire"}}]}'
)

ACCESS_POLICY = (
    '{"Version": "2012-10-17", "Statement": [{"Sid": "AllowPull", "Effect": "Allow", '
    '"Principal": {"AWS": "arn:aws:iam::123456789012:root"}, '
    '"Action": ["ecr:GetDownloadUrlForLayer", "ecr:BatchGetImage"]}]}'
)


@pytest.fixture(autouse=True)
def settings(monkeypatch):
    """Fresh settings per test, unaffected by EV_* variables on the host."""
    for key in list(os.environ):
        if key.startswith("EV_"):
            monkeypatch.delenv(key, raising=False)
    yield reload_settings()
    reload_settings()


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def write_tfvars(temp_dir):
    """Write a variables file at {temp_dir}/{scenario}/test.tfvars."""

    def _write(scenario: str, content: str, file_name: str = "test.tfvars") -> Path:
        path = temp_dir / scenario / file_name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def fake_client():
    return FakeRegistryClient()


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS credentials so boto3 never reaches a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def ecr_client(aws_credentials):
    """boto3 ECR client backed by moto."""
    with mock_aws():
        yield boto3.client("ecr", region_name="us-east-1")


@pytest.fixture
def make_repository(ecr_client):
    """Create a moto repository with optional policies and tags."""

    def _make(
        name,
        policy=ACCESS_POLICY,
        lifecycle=LIFECYCLE_POLICY,
        tags=None,
        image_tag_mutability="MUTABLE",
        scan_on_push=False,
    ):
        tags = {"provisioner": "terraform"} if tags is None else tags
        response = ecr_client.create_repository(
            repositoryName=name,
            imageTagMutability=image_tag_mutability,
            imageScanningConfiguration={"scanOnPush": scan_on_push},
            tags=[{"Key": key, "Value": value} for key, value in tags.items()],
        )
        if policy:
            ecr_client.set_repository_policy(repositoryName=name, policyText=policy)
        if lifecycle:
            ecr_client.put_lifecycle_policy(repositoryName=name, lifecyclePolicyText=lifecycle)
        return response["repository"]

    return _make
