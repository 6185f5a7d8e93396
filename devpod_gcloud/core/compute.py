"""
DevPod GCloud Provider - Compute Client

Thin wrapper around the Compute Engine v1 API scoped to one project and zone.

Each public method is one logical API operation. Mutating calls return a
zone operation which is waited on until it is DONE. API errors
(googleapiclient.errors.HttpError) are not caught here.

Usage:
    client = ComputeClient.open(project, zone, logger=logger)
    try:
        client.stop('devpod-my-workspace')
    finally:
        client.close()
"""

import time
from typing import Any, Dict, Optional

from googleapiclient.errors import HttpError

from devpod_gcloud.core.auth import AuthManager
from devpod_gcloud.core.exceptions import OperationFailedError
from devpod_gcloud.utils.logger import (
    log_api_call,
    log_operation_end,
    log_operation_start,
)

# zoneOperations().wait returns after ~2 minutes at most; keep waiting up to this
DEFAULT_OPERATION_TIMEOUT = 600


class ComputeClient:
    """
    Compute Engine client bound to {project, zone}.

    The handle owns an HTTP connection; call close() when done.
    It is not meant to be shared between operations.
    """

    def __init__(self, compute, project: str, zone: str, logger=None,
                 operation_timeout: int = DEFAULT_OPERATION_TIMEOUT):
        """
        Args:
            compute: googleapiclient discovery resource for compute v1
            project: GCP project ID
            zone: GCP zone
            logger: Optional logger for debug output
            operation_timeout: Max seconds to wait for a zone operation
        """
        self.compute = compute
        self.project = project
        self.zone = zone
        self.logger = logger
        self.operation_timeout = operation_timeout

    @classmethod
    def open(cls, project: str, zone: str, logger=None) -> 'ComputeClient':
        """
        Authenticate with ADC and open a client.

        Raises:
            AuthenticationError: If credentials are missing or the client can't be built
        """
        compute = AuthManager(logger=logger).get_client()
        return cls(compute, project, zone, logger=logger)

    def create(self, machine_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a new instance and wait for the insert to finish.

        Args:
            machine_id: Instance name (also expected in body['name'])
            body: Instance resource

        Returns:
            The finished zone operation
        """
        log_api_call(self.logger, 'instances.insert',
                     project=self.project, zone=self.zone, instance=machine_id)
        operation = self.compute.instances().insert(
            project=self.project,
            zone=self.zone,
            body=body
        ).execute()
        return self._wait_for_operation(operation, 'Create VM')

    def delete(self, machine_id: str) -> Dict[str, Any]:
        """Delete the instance and wait for the deletion to finish."""
        log_api_call(self.logger, 'instances.delete',
                     project=self.project, zone=self.zone, instance=machine_id)
        operation = self.compute.instances().delete(
            project=self.project,
            zone=self.zone,
            instance=machine_id
        ).execute()
        return self._wait_for_operation(operation, 'Delete VM')

    def start(self, machine_id: str) -> Dict[str, Any]:
        """Start a stopped instance."""
        log_api_call(self.logger, 'instances.start',
                     project=self.project, zone=self.zone, instance=machine_id)
        operation = self.compute.instances().start(
            project=self.project,
            zone=self.zone,
            instance=machine_id
        ).execute()
        return self._wait_for_operation(operation, 'Start VM')

    def stop(self, machine_id: str) -> Dict[str, Any]:
        """Stop a running instance."""
        log_api_call(self.logger, 'instances.stop',
                     project=self.project, zone=self.zone, instance=machine_id)
        operation = self.compute.instances().stop(
            project=self.project,
            zone=self.zone,
            instance=machine_id
        ).execute()
        return self._wait_for_operation(operation, 'Stop VM')

    def get(self, machine_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch the instance resource.

        Returns:
            Instance dict, or None if the instance does not exist
        """
        log_api_call(self.logger, 'instances.get',
                     project=self.project, zone=self.zone, instance=machine_id)
        try:
            return self.compute.instances().get(
                project=self.project,
                zone=self.zone,
                instance=machine_id
            ).execute()
        except HttpError as e:
            if e.resp.status == 404:
                return None
            raise

    def check_zone(self) -> Dict[str, Any]:
        """Fetch the zone resource; fails if the project or zone is unreachable."""
        log_api_call(self.logger, 'zones.get', project=self.project, zone=self.zone)
        return self.compute.zones().get(
            project=self.project,
            zone=self.zone
        ).execute()

    def close(self):
        """Release the underlying HTTP connection."""
        self.compute.close()

    def _wait_for_operation(self, operation: Dict[str, Any], operation_name: str) -> Dict[str, Any]:
        """
        Wait for a zone operation to reach DONE.

        Raises:
            OperationFailedError: If the operation finished with errors or timed out
        """
        start_time = log_operation_start(self.logger, operation_name)

        while operation.get('status') != 'DONE':
            if time.time() - start_time > self.operation_timeout:
                raise OperationFailedError(
                    operation_name,
                    f"timeout waiting for operation {operation.get('name')} (>{self.operation_timeout}s)"
                )

            if self.logger:
                self.logger.debug(f"Operation {operation.get('name')} status: {operation.get('status')}")

            operation = self.compute.zoneOperations().wait(
                project=self.project,
                zone=self.zone,
                operation=operation['name']
            ).execute()

        error = operation.get('error')
        if error:
            messages = [
                err.get('message') or err.get('code', 'unknown error')
                for err in error.get('errors', [])
            ]
            raise OperationFailedError(operation_name, '; '.join(messages) or str(error))

        log_operation_end(self.logger, operation_name, start_time)
        return operation
