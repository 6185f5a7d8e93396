"""
DevPod GCloud Provider - Configuration Management

This module reads the provider options that the DevPod host passes through
environment variables. Options are loaded once per process and never change.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from devpod_gcloud.core.exceptions import ConfigurationError

# Version for usage tracking
VERSION = '0.1.0'

# Instance names are prefixed so DevPod machines are easy to spot
MACHINE_ID_PREFIX = 'devpod-'

# Compute Engine resource name rules
_INSTANCE_NAME_RE = re.compile(r'^[a-z]([-a-z0-9]*[a-z0-9])?$')
_INSTANCE_NAME_MAX_LEN = 63

# Defaults for optional settings
DEFAULT_MACHINE_FOLDER = os.path.join('~', '.devpod', 'gcloud')
DEFAULT_MACHINE_TYPE = 'c2-standard-4'
DEFAULT_DISK_SIZE_GB = 40
DEFAULT_DISK_IMAGE = 'projects/cos-cloud/global/images/cos-101-17162-127-5'

_TRUE_VALUES = ('1', 'true', 'yes', 'on')
_FALSE_VALUES = ('0', 'false', 'no', 'off')


@dataclass(frozen=True)
class ProviderOptions:
    """
    Provider configuration for one invocation.

    The host orchestrator sets these as environment variables before running
    any command. Use ProviderOptions.from_env() to build it.

    Example:
        options = ProviderOptions.from_env()
        print(options.project, options.zone, options.machine_id)
    """

    # Target instance
    project: str
    zone: str
    machine_id: str

    # Where the SSH key pair lives
    machine_folder: str = DEFAULT_MACHINE_FOLDER

    # Instance settings (used by create)
    machine_type: str = DEFAULT_MACHINE_TYPE
    disk_size: int = DEFAULT_DISK_SIZE_GB
    disk_image: str = DEFAULT_DISK_IMAGE
    network: str = ''
    subnetwork: str = ''
    tags: Tuple[str, ...] = field(default_factory=tuple)
    service_account: str = ''
    public_ip_enabled: bool = True

    # SSH behavior. Off keeps the historical trust model: any host key is accepted.
    strict_host_key_checking: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'ProviderOptions':
        """
        Load options from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            ProviderOptions: Validated options

        Raises:
            ConfigurationError: If a required variable is missing or a value is invalid
        """
        env = os.environ if environ is None else environ

        return cls(
            project=_required(env, 'PROJECT'),
            zone=_required(env, 'ZONE'),
            machine_id=machine_id_to_instance_name(_required(env, 'MACHINE_ID')),
            machine_folder=os.path.expanduser(
                env.get('MACHINE_FOLDER') or DEFAULT_MACHINE_FOLDER
            ),
            machine_type=env.get('MACHINE_TYPE') or DEFAULT_MACHINE_TYPE,
            disk_size=_positive_int(env, 'DISK_SIZE', DEFAULT_DISK_SIZE_GB),
            disk_image=env.get('DISK_IMAGE') or DEFAULT_DISK_IMAGE,
            network=env.get('NETWORK', ''),
            subnetwork=env.get('SUBNETWORK', ''),
            tags=_split_list(env.get('TAGS', '')),
            service_account=env.get('SERVICE_ACCOUNT', ''),
            public_ip_enabled=_boolean(env, 'PUBLIC_IP_ENABLED', True),
            strict_host_key_checking=_boolean(env, 'STRICT_HOST_KEY_CHECKING', False),
        )


def machine_id_to_instance_name(machine_id: str) -> str:
    """
    Turn a DevPod machine id into a Compute Engine instance name.

    Example:
        >>> machine_id_to_instance_name('My-Workspace')
        'devpod-my-workspace'
    """
    name = machine_id.strip().lower()
    if not name.startswith(MACHINE_ID_PREFIX):
        name = MACHINE_ID_PREFIX + name

    if len(name) > _INSTANCE_NAME_MAX_LEN or not _INSTANCE_NAME_RE.match(name):
        raise ConfigurationError(
            'MACHINE_ID',
            f"'{machine_id}' does not form a valid instance name ('{name}')",
            fix='use lowercase letters, digits and dashes (at most 63 characters)'
        )
    return name


def get_command(environ: Optional[Mapping[str, str]] = None) -> str:
    """Command the host wants executed on the machine (DEVPOD_COMMAND)."""
    env = os.environ if environ is None else environ
    return _required(env, 'DEVPOD_COMMAND')


def _required(env: Mapping[str, str], name: str) -> str:
    value = env.get(name, '').strip()
    if not value:
        raise ConfigurationError(
            name,
            'environment variable is not set',
            fix=f'export {name}=<value>'
        )
    return value


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, '').strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(name, f"'{raw}' is not a number")
    if value <= 0:
        raise ConfigurationError(name, f'must be greater than 0, got {value}')
    return value


def _boolean(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name, '').strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ConfigurationError(name, f"'{raw}' is not a boolean (use true or false)")


def _split_list(raw: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(',') if item.strip())
