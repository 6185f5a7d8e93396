"""
DevPod GCloud Provider - Custom Exception Classes

This module defines all custom exceptions raised by the provider.
Each exception builds a readable message; the CLI prints it and exits non-zero.

Errors from the Compute API itself (googleapiclient.errors.HttpError) are
not wrapped here, they propagate to the CLI unchanged.
"""


class ProviderError(Exception):
    """
    Base exception for all provider errors.

    All custom exceptions inherit from this, making it easy to catch
    any provider-specific error with a single except clause.
    """
    pass


class ConfigurationError(ProviderError):
    """
    Raised when the environment does not describe a usable configuration.

    Common causes:
    - Required variable (PROJECT, ZONE, MACHINE_ID) not set
    - Value that cannot be parsed (e.g. DISK_SIZE=abc)
    """

    def __init__(self, variable: str, message: str, fix: str = None):
        """
        Args:
            variable: Name of the offending environment variable
            message: Error description
            fix: Suggested fix (optional)
        """
        self.variable = variable
        self.fix = fix

        full_message = f"{variable}: {message}"
        if fix:
            full_message += f"\n\nFix: {fix}"
        super().__init__(full_message)


class AuthenticationError(ProviderError):
    """
    Raised when authentication fails.

    Common causes:
    - No credentials configured
    - Credentials expired
    - Invalid credentials
    """

    def __init__(self, message: str, fix: str = None):
        """
        Args:
            message: Error description
            fix: Suggested fix command (e.g., "gcloud auth login")
        """
        self.fix = fix
        full_message = f"{message}"
        if fix:
            full_message += f"\n\nFix: {fix}"
        super().__init__(full_message)


class VMNotFoundError(ProviderError):
    """
    Raised when the configured instance doesn't exist.
    """

    def __init__(self, vm_name: str, zone: str, project: str):
        self.vm_name = vm_name
        self.zone = zone
        self.project = project

        message = f"Instance '{vm_name}' not found in zone '{zone}' (project: {project})"
        super().__init__(message)


class OperationFailedError(ProviderError):
    """
    Raised when a Compute Engine zone operation completes with an error.
    """

    def __init__(self, operation_name: str, reason: str):
        """
        Args:
            operation_name: Name of the operation (e.g., 'Stop VM')
            reason: Why it failed
        """
        self.operation_name = operation_name
        self.reason = reason

        message = f"Operation '{operation_name}' failed: {reason}"
        super().__init__(message)


class StageError(ProviderError):
    """
    Error wrapped with the short label of the stage that failed.

    The underlying exception is kept as ``cause`` and chained with
    ``raise ... from``.
    """

    def __init__(self, stage: str, cause: Exception = None):
        self.stage = stage
        self.cause = cause

        message = stage if cause is None else f"{stage}: {cause}"
        super().__init__(message)


class KeyBootstrapError(StageError):
    """
    Raised when the SSH key pair cannot be prepared or read.

    Stages: create key directory, generate key pair, write public ssh key,
    write private ssh key, read public ssh key, read private ssh key.
    """
    pass


class RemoteShellError(StageError):
    """
    Raised when an SSH session cannot be established.

    Stages: parse private key, dial to <address>.
    """
    pass
