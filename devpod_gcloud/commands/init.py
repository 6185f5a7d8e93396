"""
DevPod GCloud Provider - Init Command

Checks that the configuration is usable before the host starts creating
machines: credentials resolve, and the project and zone can be read.
"""

from devpod_gcloud.commands.base import BaseCommand


class InitCommand(BaseCommand):
    """Validates credentials and the configured project/zone."""

    @property
    def name(self) -> str:
        return "init"

    def execute(self, client):
        zone = client.check_zone()
        self._log_debug(f"Zone {zone.get('name', self.options.zone)} status: {zone.get('status')}")
        self._log_info(
            f"[OK] Project {self.options.project} and zone {self.options.zone} are reachable"
        )
