"""
DevPod GCloud Provider - SSH Client Factory

Builds authenticated paramiko sessions to a provisioned instance.

Host key verification is an explicit choice of the caller. With
verify_host_key=False any host key is accepted, which is what DevPod machines
have always done (no known_hosts entry exists for a freshly created VM).
Callers needing host verification must pass verify_host_key=True and have
the host key in the system known_hosts.
"""

import io
from typing import Tuple, Union

import paramiko

from devpod_gcloud.core.exceptions import RemoteShellError

SSH_USER = 'devpod'
SSH_PORT = 22
CONNECT_TIMEOUT = 30

# Key types tried in order when parsing private key material
_KEY_CLASSES = (paramiko.RSAKey, paramiko.ECDSAKey, paramiko.Ed25519Key)


def new_client(address: str, key_bytes: Union[bytes, str], *, verify_host_key: bool,
               user: str = SSH_USER, logger=None,
               timeout: float = CONNECT_TIMEOUT) -> paramiko.SSHClient:
    """
    Connect to address and authenticate with the given private key.

    Args:
        address: "host" or "host:port" (default port 22)
        key_bytes: Private key material (PEM or OpenSSH format)
        verify_host_key: Reject hosts missing from known_hosts when True,
            accept any host key when False
        user: Remote user name
        logger: Optional logger
        timeout: TCP connect timeout in seconds

    Returns:
        paramiko.SSHClient: Connected client, owned by the caller

    Raises:
        RemoteShellError: If the key can't be parsed or the connection fails

    Example:
        client = new_client('34.1.2.3', key, verify_host_key=False)
        try:
            _, stdout, _ = client.exec_command('uname -a')
        finally:
            client.close()
    """
    pkey = parse_private_key(key_bytes)
    host, port = split_address(address)

    client = paramiko.SSHClient()
    if verify_host_key:
        client.load_system_host_keys()
        client.set_missing_host_key_policy(paramiko.RejectPolicy())
    else:
        if logger:
            logger.warning(f"Host key verification disabled for {host}:{port}")
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    try:
        client.connect(
            hostname=host,
            port=port,
            username=user,
            pkey=pkey,
            timeout=timeout,
            allow_agent=False,
            look_for_keys=False,
        )
    except (paramiko.SSHException, OSError) as e:
        client.close()
        raise RemoteShellError(f"dial to {address}", e) from e

    return client


def parse_private_key(key_bytes: Union[bytes, str]) -> paramiko.PKey:
    """
    Parse private key material into a paramiko key.

    Raises:
        RemoteShellError: If no supported key type can read it
    """
    if isinstance(key_bytes, bytes):
        key_bytes = key_bytes.decode('utf-8', errors='replace')

    last_error = None
    for key_class in _KEY_CLASSES:
        try:
            return key_class.from_private_key(io.StringIO(key_bytes))
        except (paramiko.SSHException, ValueError) as e:
            last_error = e

    raise RemoteShellError('parse private key', last_error) from last_error


def split_address(address: str) -> Tuple[str, int]:
    """
    Split "host[:port]" into (host, port).

    IPv6 literals take a port only in brackets ("[2001:db8::1]:2222");
    a bare IPv6 literal uses the default port.

    Example:
        >>> split_address('10.0.0.2:2222')
        ('10.0.0.2', 2222)
        >>> split_address('2001:db8::1')
        ('2001:db8::1', 22)
    """
    if address.startswith('['):
        host, sep, rest = address[1:].partition(']')
        if not sep:
            return address, SSH_PORT
        if rest.startswith(':') and rest[1:].isdigit():
            return host, int(rest[1:])
        return host, SSH_PORT

    host, sep, port = address.rpartition(':')
    if not sep or ':' in host or not port.isdigit():
        return address, SSH_PORT
    return host, int(port)
