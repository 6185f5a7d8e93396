"""
DevPod GCloud Provider - Delete Command

Deletes the instance. The boot disk goes with it (autoDelete).
"""

from devpod_gcloud.commands.base import BaseCommand


class DeleteCommand(BaseCommand):
    """Deletes the configured instance."""

    @property
    def name(self) -> str:
        return "delete"

    def execute(self, client):
        self._log_info(f"Deleting instance {self.options.machine_id}...")
        client.delete(self.options.machine_id)
        self._log_info(f"[OK] Instance {self.options.machine_id} deleted")
