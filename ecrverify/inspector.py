"""
Resource Inspector - live ECR state behind a narrow client capability.

All provider-specific request and response shaping lives here. The rest of
the pipeline only sees LiveResourceState, Policy, tag mappings, ``None`` for
an absent sub-resource, and ProviderAPIError for real failures.
"""

import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import ProviderAPIError
from .models import LiveResourceState, Policy

logger = logging.getLogger(__name__)

# Provider error codes meaning "this does not exist" rather than "call failed"
REPOSITORY_NOT_FOUND = "RepositoryNotFoundException"
POLICY_NOT_FOUND = "RepositoryPolicyNotFoundException"
LIFECYCLE_NOT_FOUND = "LifecyclePolicyNotFoundException"

_NOT_FOUND = object()


class RegistryClient(Protocol):
    """The subset of the boto3 ECR client the inspector relies on."""

    def describe_repositories(self, **kwargs: Any) -> Dict[str, Any]:
        ...

    def get_repository_policy(self, **kwargs: Any) -> Dict[str, Any]:
        ...

    def get_lifecycle_policy(self, **kwargs: Any) -> Dict[str, Any]:
        ...

    def list_tags_for_resource(self, **kwargs: Any) -> Dict[str, Any]:
        ...


def create_ecr_client(region: Optional[str] = None, profile: Optional[str] = None) -> RegistryClient:
    """
    Build an ECR client from the ambient AWS credential chain.

    Args:
        region: AWS region (falls back to the session default)
        profile: Named profile (falls back to the default chain)

    Returns:
        boto3 ECR client

    Raises:
        ProviderAPIError: If the session cannot be created (e.g. unknown
            profile or no region)
    """
    try:
        session = boto3.session.Session(profile_name=profile, region_name=region)
        client = session.client("ecr")
    except BotoCoreError as e:
        raise ProviderAPIError("create_client", str(e)) from e
    logger.debug(f"ECR client initialized (region={client.meta.region_name})")
    return client


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


def _error_message(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Message", "") or str(error)


class ResourceInspector:
    """
    Fetches live repository state through a pre-authenticated client.

    Every fetch is a separate provider call, so a repository can be found
    while its policies are not; each fetch reports independently.
    """

    def __init__(
        self,
        client: RegistryClient,
        max_retries: int = 0,
        retry_base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the inspector.

        Args:
            client: boto3 ECR client or any object with the same four methods
            max_retries: Retries on ProviderAPIError (0 disables retrying)
            retry_base_delay: Base delay in seconds for exponential backoff
            sleep: Sleep function, replaceable in tests
        """
        self.client = client
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self._sleep = sleep

    def _call(self, operation: str, not_found: Iterable[str] = (), **kwargs: Any) -> Any:
        """Invoke one client operation.

        Returns the response, or ``_NOT_FOUND`` when the provider answers with
        one of the ``not_found`` codes. Any other failure becomes a
        ProviderAPIError, retried with backoff up to ``max_retries`` times.
        """
        not_found = set(not_found)
        method = getattr(self.client, operation)
        attempt = 0

        while True:
            try:
                return method(**kwargs)
            except ClientError as e:
                code = _error_code(e)
                if code in not_found:
                    logger.debug(f"{operation}: {code}")
                    return _NOT_FOUND
                cause: Exception = e
                error = ProviderAPIError(operation, _error_message(e), code or None)
            except BotoCoreError as e:
                cause = e
                error = ProviderAPIError(operation, str(e))

            if attempt >= self.max_retries:
                raise error from cause

            delay = self.retry_base_delay * (2 ** attempt)
            attempt += 1
            logger.warning(
                f"{error}; retrying in {delay:.1f}s (attempt {attempt}/{self.max_retries})"
            )
            self._sleep(delay)

    def _describe_page_loop(self, names: List[str]) -> Any:
        repositories: List[Dict[str, Any]] = []
        kwargs: Dict[str, Any] = {"repositoryNames": names}
        while True:
            response = self._call(
                "describe_repositories", not_found=(REPOSITORY_NOT_FOUND,), **kwargs
            )
            if response is _NOT_FOUND:
                return _NOT_FOUND
            repositories.extend(response.get("repositories", []))
            token = response.get("nextToken")
            if not token:
                return repositories
            kwargs["nextToken"] = token

    def describe(self, identifiers: List[str]) -> List[LiveResourceState]:
        """
        Describe repositories by name.

        Args:
            identifiers: Repository names to look up

        Returns:
            Live state of the repositories that exist, in the order the names
            were given. An empty list when none exist.

        Raises:
            ProviderAPIError: On transport, auth or request failures
        """
        names = list(dict.fromkeys(identifiers))
        if not names:
            return []

        logger.debug(f"Describing repositories: {', '.join(names)}")
        found = self._describe_page_loop(names)

        if found is _NOT_FOUND:
            # The provider rejects the whole batch if any one name is missing
            found = []
            if len(names) > 1:
                for name in names:
                    single = self._describe_page_loop([name])
                    if single is not _NOT_FOUND:
                        found.extend(single)

        by_name = {}
        for repository in found:
            state = LiveResourceState.from_api(repository)
            by_name[state.name] = state

        states = [by_name[name] for name in names if name in by_name]
        logger.debug(f"Found {len(states)} of {len(names)} repositories")
        return states

    def fetch_access_policy(self, identifier: str) -> Optional[Policy]:
        """Return the repository's access policy, or None if none is attached."""
        response = self._call(
            "get_repository_policy",
            not_found=(POLICY_NOT_FOUND, REPOSITORY_NOT_FOUND),
            repositoryName=identifier,
        )
        if response is _NOT_FOUND or not response.get("policyText"):
            return None
        return Policy(repository_name=identifier, text=response["policyText"])

    def fetch_lifecycle_policy(self, identifier: str) -> Optional[Policy]:
        """Return the repository's lifecycle policy, or None if none is set."""
        response = self._call(
            "get_lifecycle_policy",
            not_found=(LIFECYCLE_NOT_FOUND, REPOSITORY_NOT_FOUND),
            repositoryName=identifier,
        )
        if response is _NOT_FOUND or not response.get("lifecyclePolicyText"):
            return None
        return Policy(repository_name=identifier, text=response["lifecyclePolicyText"])

    def fetch_tags(self, arn: str) -> Dict[str, str]:
        """Return the tags on a repository ARN; an empty dict is valid."""
        response = self._call(
            "list_tags_for_resource",
            not_found=(REPOSITORY_NOT_FOUND,),
            resourceArn=arn,
        )
        if response is _NOT_FOUND:
            return {}
        return {tag["Key"]: tag["Value"] for tag in response.get("tags", [])}
