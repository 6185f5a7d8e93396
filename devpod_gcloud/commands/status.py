"""
DevPod GCloud Provider - Status Command

Reports the instance state in the vocabulary the DevPod host expects.

Mapping:
    RUNNING                          -> Running
    TERMINATED, STOPPED, SUSPENDED   -> Stopped
    any other status (PROVISIONING,
    STAGING, STOPPING, ...)          -> Busy
    instance missing                 -> NotFound
"""

from devpod_gcloud.commands.base import BaseCommand

STATUS_RUNNING = 'Running'
STATUS_STOPPED = 'Stopped'
STATUS_BUSY = 'Busy'
STATUS_NOT_FOUND = 'NotFound'

_STOPPED_STATES = ('TERMINATED', 'STOPPED', 'SUSPENDED')


class StatusCommand(BaseCommand):
    """
    Looks up the configured instance and returns its DevPod status.

    Example:
        status = StatusCommand(options).run()   # 'Running'
    """

    @property
    def name(self) -> str:
        return "status"

    def execute(self, client) -> str:
        instance = client.get(self.options.machine_id)
        if instance is None:
            self._log_debug(f"Instance {self.options.machine_id} not found")
            return STATUS_NOT_FOUND

        gce_status = instance.get('status', '')
        self._log_debug(f"Instance {self.options.machine_id} GCE status: {gce_status}")
        return to_devpod_status(gce_status)


def to_devpod_status(gce_status: str) -> str:
    """Map a Compute Engine instance status to a DevPod status."""
    if gce_status == 'RUNNING':
        return STATUS_RUNNING
    if gce_status in _STOPPED_STATES:
        return STATUS_STOPPED
    return STATUS_BUSY
