"""
DevPod GCloud Provider - Command Command

Runs DEVPOD_COMMAND on the instance over SSH. The host uses this both for
one-off commands and as a tunnel, so stdin is forwarded and stdout/stderr
are streamed as they arrive. The remote exit status becomes ours.
"""

import threading
from typing import Any, Callable, Dict, Optional

from devpod_gcloud.commands.base import BaseCommand
from devpod_gcloud.core.exceptions import RemoteShellError, VMNotFoundError
from devpod_gcloud.ssh.client import new_client
from devpod_gcloud.ssh.keys import get_private_key

BUFFER_SIZE = 32 * 1024


class RemoteCommand(BaseCommand):
    """
    Executes a shell command on the configured instance.

    Example:
        exit_code = RemoteCommand(
            options, command='uname -a',
            stdin=sys.stdin.buffer, stdout=sys.stdout.buffer, stderr=sys.stderr.buffer,
        ).run()
    """

    def __init__(self, options, command: str, stdin=None, stdout=None, stderr=None,
                 logger=None, client_factory=None,
                 ssh_factory: Optional[Callable[..., Any]] = None):
        """
        Args:
            options: Provider options
            command: Shell command to run remotely
            stdin: Binary stream forwarded to the remote command (None: no input)
            stdout: Binary stream receiving remote stdout
            stderr: Binary stream receiving remote stderr
            logger: Optional logger
            client_factory: Compute client factory
            ssh_factory: SSH client factory (default: ssh.client.new_client)
        """
        super().__init__(options, logger=logger, client_factory=client_factory)
        self.command = command
        self.stdin = stdin
        self.stdout = stdout
        self.stderr = stderr
        self.ssh_factory = ssh_factory or new_client

    @property
    def name(self) -> str:
        return "command"

    def execute(self, client) -> int:
        instance = client.get(self.options.machine_id)
        if instance is None:
            raise VMNotFoundError(self.options.machine_id, self.options.zone, self.options.project)

        address = instance_address(instance)
        if not address:
            raise RemoteShellError(f"resolve address of {self.options.machine_id}")

        private_key = get_private_key(self.options.machine_folder)

        self._log_debug(f"Running command on {address}: {self.command}")
        ssh = self.ssh_factory(
            address,
            private_key,
            verify_host_key=self.options.strict_host_key_checking,
            logger=self.logger,
        )
        try:
            return run_remote(ssh, self.command, self.stdin, self.stdout, self.stderr,
                              logger=self.logger)
        finally:
            ssh.close()


def instance_address(instance: Dict[str, Any]) -> Optional[str]:
    """
    Pick the address to SSH to: the external NAT IP, else the internal IP.
    """
    interfaces = instance.get('networkInterfaces') or []
    for interface in interfaces:
        for access_config in interface.get('accessConfigs') or []:
            if access_config.get('natIP'):
                return access_config['natIP']

    for interface in interfaces:
        if interface.get('networkIP'):
            return interface['networkIP']

    return None


def run_remote(ssh, command: str, stdin, stdout, stderr, logger=None) -> int:
    """
    Execute command on an open paramiko client and wait for it.

    Returns:
        int: Remote exit status
    """
    transport = ssh.get_transport()
    if transport is None:
        raise RemoteShellError('open session', RuntimeError('SSH transport not available'))

    channel = transport.open_session()
    channel.exec_command(command)

    readers = [
        threading.Thread(target=_copy_output, args=(channel.recv, stdout), daemon=True),
        threading.Thread(target=_copy_output, args=(channel.recv_stderr, stderr), daemon=True),
    ]
    for reader in readers:
        reader.start()

    if stdin is None:
        channel.shutdown_write()
    else:
        # Blocks on local input, so it may outlive the command
        threading.Thread(
            target=_forward_input, args=(stdin, channel, logger), daemon=True
        ).start()

    for reader in readers:
        reader.join()

    exit_status = channel.recv_exit_status()
    channel.close()

    if logger:
        logger.debug(f"Remote command exited with status {exit_status}")
    return exit_status


def _copy_output(recv, out):
    while True:
        data = recv(BUFFER_SIZE)
        if not data:
            return
        if out is not None:
            out.write(data)
            out.flush()


def _forward_input(stdin, channel, logger):
    read = getattr(stdin, 'read1', stdin.read)
    try:
        while True:
            data = read(BUFFER_SIZE)
            if not data:
                break
            channel.sendall(data)
        channel.shutdown_write()
    except OSError as e:
        # remote side closed its input
        if logger:
            logger.debug(f"Stopped forwarding stdin: {e}")
