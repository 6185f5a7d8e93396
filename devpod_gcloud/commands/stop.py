"""
DevPod GCloud Provider - Stop Command

Stops the instance. Disks are kept, so a later start resumes the workspace.
"""

from devpod_gcloud.commands.base import BaseCommand


class StopCommand(BaseCommand):
    """Stops the configured instance."""

    @property
    def name(self) -> str:
        return "stop"

    def execute(self, client):
        self._log_info(f"Stopping instance {self.options.machine_id}...")
        client.stop(self.options.machine_id)
        self._log_info(f"[OK] Instance {self.options.machine_id} stopped")
