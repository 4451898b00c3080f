"""
ecrverify errors.
"""

from typing import Any


class EcrVerifyError(Exception):
    """Base exception for all ecrverify errors."""
    pass


class ConfigurationError(EcrVerifyError):
    """Errors in declared configuration."""
    pass


class ConfigFileError(ConfigurationError):
    """The scenario variables file is missing or cannot be parsed."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        if path:
            message = f"{message} ({path})"
        super().__init__(message)


class ConfigVariableNotFound(ConfigurationError):
    """A required variable is absent from the scenario variables file."""

    def __init__(self, name: str, path: str | None = None):
        self.name = name
        self.path = path
        message = f"Variable '{name}' not found in declared configuration"
        if path:
            message += f" at {path}"
        super().__init__(message)


class OutputNotFound(EcrVerifyError):
    """A provisioning output was not exposed after apply."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Output '{name}' not found in provisioning outputs")


class ProviderAPIError(EcrVerifyError):
    """Transport, auth, or malformed-request failure from the provider API."""

    def __init__(self, operation: str, message: str, code: str | None = None):
        self.operation = operation
        self.code = code
        detail = f"{operation} failed"
        if code:
            detail += f" [{code}]"
        super().__init__(f"{detail}: {message}")


class ExpectationMismatch(EcrVerifyError):
    """An actual value was fetched but does not match the expected value."""

    def __init__(self, description: str, expected: Any, actual: Any):
        self.description = description
        self.expected = expected
        self.actual = actual
        super().__init__(f"{description}: expected {expected!r}, got {actual!r}")


class ProvisioningError(EcrVerifyError):
    """The provisioning tool could not report its outputs."""
    pass
