"""
SSH package: key pair bootstrap and client factory.

Usage:
    from devpod_gcloud.ssh import get_private_key, new_client

    key = get_private_key(options.machine_folder)
    client = new_client('34.1.2.3', key, verify_host_key=False)
"""

from devpod_gcloud.ssh.client import new_client, parse_private_key
from devpod_gcloud.ssh.keys import (
    PRIVATE_KEY_FILE,
    PUBLIC_KEY_FILE,
    ensure_key_pair,
    get_private_key,
    get_public_key,
)

__all__ = [
    'new_client',
    'parse_private_key',
    'ensure_key_pair',
    'get_private_key',
    'get_public_key',
    'PRIVATE_KEY_FILE',
    'PUBLIC_KEY_FILE',
]
