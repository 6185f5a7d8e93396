"""
DevPod GCloud Provider - Base Command

Every provider verb is a command object. A command:
1. Receives its options, logger and compute client factory in the constructor
2. Opens a compute client for {project, zone}
3. Performs its operation in execute()
4. Closes the client, whether execute() succeeded or not

Errors are never caught here; they reach the CLI unchanged.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from devpod_gcloud.core.compute import ComputeClient
from devpod_gcloud.core.config import ProviderOptions

# (project, zone, logger) -> ComputeClient
ClientFactory = Callable[..., ComputeClient]


class BaseCommand(ABC):
    """
    Base class for all provider commands.

    Example usage:
        command = StopCommand(options, logger=logger)
        command.run()

    Tests inject a client factory returning a mock:
        command = StopCommand(options, client_factory=lambda *a, **kw: mock_client)
    """

    def __init__(self, options: ProviderOptions, logger=None,
                 client_factory: Optional[ClientFactory] = None):
        """
        Args:
            options: Provider options for this invocation
            logger: Optional logger
            client_factory: Builds the compute client (default: ComputeClient.open)
        """
        self.options = options
        self.logger = logger
        self.client_factory = client_factory or ComputeClient.open

    @property
    @abstractmethod
    def name(self) -> str:
        """Verb name, used for display and logging."""
        pass

    @abstractmethod
    def execute(self, client: ComputeClient) -> Any:
        """Perform the command against an open client."""
        pass

    def run(self) -> Any:
        """
        Open the compute client, execute, and always close the client.

        Returns:
            Whatever execute() returns
        """
        self._log_debug(
            f"{self.name}: project={self.options.project} zone={self.options.zone} "
            f"machine={self.options.machine_id}"
        )
        client = self.client_factory(self.options.project, self.options.zone, logger=self.logger)
        try:
            return self.execute(client)
        finally:
            client.close()

    def _log_debug(self, message: str):
        """Log debug message if logger available."""
        if self.logger:
            self.logger.debug(message)

    def _log_info(self, message: str):
        """Log info message if logger available."""
        if self.logger:
            self.logger.info(message)
