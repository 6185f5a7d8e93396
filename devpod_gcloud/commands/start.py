"""DevPod GCloud Provider - Start Command"""

from devpod_gcloud.commands.base import BaseCommand


class StartCommand(BaseCommand):
    """Starts the configured instance."""

    @property
    def name(self) -> str:
        return "start"

    def execute(self, client):
        self._log_info(f"Starting instance {self.options.machine_id}...")
        client.start(self.options.machine_id)
        self._log_info(f"[OK] Instance {self.options.machine_id} started")
