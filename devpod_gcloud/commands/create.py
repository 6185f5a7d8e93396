"""
DevPod GCloud Provider - Create Command

Creates the instance. The SSH public key from the machine folder is
injected as instance metadata so the devpod user can log in.
"""

from typing import Any, Dict

from devpod_gcloud.commands.base import BaseCommand
from devpod_gcloud.core.config import ProviderOptions
from devpod_gcloud.ssh.client import SSH_USER
from devpod_gcloud.ssh.keys import get_public_key

CLOUD_PLATFORM_SCOPE = 'https://www.googleapis.com/auth/cloud-platform'


class CreateCommand(BaseCommand):
    """
    Creates the configured instance.

    Example:
        CreateCommand(options, logger=logger).run()
    """

    @property
    def name(self) -> str:
        return "create"

    def execute(self, client):
        public_key = get_public_key(self.options.machine_folder)
        body = build_instance_body(self.options, public_key)

        self._log_info(f"Creating instance {self.options.machine_id}...")
        client.create(self.options.machine_id, body)
        self._log_info(f"[OK] Instance {self.options.machine_id} created")


def build_instance_body(options: ProviderOptions, public_key: str) -> Dict[str, Any]:
    """
    Build the instances.insert request body.

    Args:
        options: Provider options
        public_key: authorized_keys line for the devpod user

    Returns:
        dict: Compute Engine instance resource
    """
    zone = options.zone

    network_interface: Dict[str, Any] = {}
    if options.network:
        network_interface['network'] = _resource_path(
            options.network, f'projects/{options.project}/global/networks/'
        )
    if options.subnetwork:
        network_interface['subnetwork'] = _resource_path(
            options.subnetwork,
            f'projects/{options.project}/regions/{_region(zone)}/subnetworks/'
        )
    if options.public_ip_enabled:
        network_interface['accessConfigs'] = [{
            'name': 'External NAT',
            'type': 'ONE_TO_ONE_NAT',
        }]

    body: Dict[str, Any] = {
        'name': options.machine_id,
        'machineType': f'zones/{zone}/machineTypes/{options.machine_type}',
        'disks': [{
            'boot': True,
            'autoDelete': True,
            'type': 'PERSISTENT',
            'initializeParams': {
                'diskSizeGb': str(options.disk_size),
                'sourceImage': options.disk_image,
            },
        }],
        'networkInterfaces': [network_interface],
        'metadata': {
            'items': [{
                'key': 'ssh-keys',
                'value': f'{SSH_USER}:{public_key.strip()}',
            }],
        },
        'labels': {'devpod': 'true'},
    }

    if options.tags:
        body['tags'] = {'items': list(options.tags)}

    if options.service_account:
        body['serviceAccounts'] = [{
            'email': options.service_account,
            'scopes': [CLOUD_PLATFORM_SCOPE],
        }]

    return body


def _region(zone: str) -> str:
    # us-central1-a -> us-central1
    return zone.rsplit('-', 1)[0]


def _resource_path(value: str, prefix: str) -> str:
    """Expand a bare resource name; keep full or partial URLs as given."""
    if '/' in value:
        return value
    return prefix + value
