"""Unit tests for running DEVPOD_COMMAND on the instance over SSH."""

import io
from unittest.mock import MagicMock

import pytest

from conftest import FAKE_PRIVATE_KEY, MACHINE_ID
from devpod_gcloud.commands import RemoteCommand
from devpod_gcloud.commands.command import _forward_input, instance_address, run_remote
from devpod_gcloud.core.exceptions import RemoteShellError, VMNotFoundError


INSTANCE = {
    "name": MACHINE_ID,
    "status": "RUNNING",
    "networkInterfaces": [{
        "networkIP": "10.128.0.5",
        "accessConfigs": [{"name": "External NAT", "natIP": "34.1.2.3"}],
    }],
}


def _fake_ssh(stdout_chunks=(b"",), stderr_chunks=(b"",), exit_status=0):
    ssh = MagicMock()
    channel = ssh.get_transport.return_value.open_session.return_value
    channel.recv.side_effect = list(stdout_chunks)
    channel.recv_stderr.side_effect = list(stderr_chunks)
    channel.recv_exit_status.return_value = exit_status
    return ssh, channel


@pytest.mark.parametrize("instance, expected", [
    (INSTANCE, "34.1.2.3"),
    ({"networkInterfaces": [{"networkIP": "10.128.0.5", "accessConfigs": [{"name": "nat"}]}]}, "10.128.0.5"),
    ({"networkInterfaces": [{"networkIP": "10.128.0.5"}]}, "10.128.0.5"),
    ({}, None),
])
def test_instance_address(instance, expected):
    assert instance_address(instance) == expected


def test_run_remote_streams_output_and_returns_exit_status():
    ssh, channel = _fake_ssh(
        stdout_chunks=[b"hello ", b"world", b""],
        stderr_chunks=[b"warning", b""],
        exit_status=3,
    )
    stdout, stderr = io.BytesIO(), io.BytesIO()

    exit_status = run_remote(ssh, "echo hello world", None, stdout, stderr)

    assert exit_status == 3
    channel.exec_command.assert_called_once_with("echo hello world")
    assert stdout.getvalue() == b"hello world"
    assert stderr.getvalue() == b"warning"
    # No input: remote stdin is closed right away
    channel.shutdown_write.assert_called_once_with()
    channel.close.assert_called_once_with()


def test_run_remote_without_transport():
    ssh = MagicMock()
    ssh.get_transport.return_value = None

    with pytest.raises(RemoteShellError):
        run_remote(ssh, "true", None, io.BytesIO(), io.BytesIO())


def test_forward_input_sends_everything_then_eof():
    channel = MagicMock()

    _forward_input(io.BytesIO(b"some input"), channel, None)

    channel.sendall.assert_called_once_with(b"some input")
    channel.shutdown_write.assert_called_once_with()


def test_forward_input_stops_when_remote_closed():
    channel = MagicMock()
    channel.sendall.side_effect = OSError("Socket is closed")

    _forward_input(io.BytesIO(b"data"), channel, MagicMock())

    channel.shutdown_write.assert_not_called()


def test_remote_command(options, mock_client, client_factory):
    mock_client.get.return_value = INSTANCE
    ssh, _ = _fake_ssh(stdout_chunks=[b"Linux", b""], exit_status=0)
    ssh_factory = MagicMock(return_value=ssh)
    stdout = io.BytesIO()

    exit_status = RemoteCommand(
        options,
        command="uname",
        stdout=stdout,
        stderr=io.BytesIO(),
        client_factory=client_factory,
        ssh_factory=ssh_factory,
    ).run()

    assert exit_status == 0
    assert stdout.getvalue() == b"Linux"
    ssh_factory.assert_called_once_with(
        "34.1.2.3", FAKE_PRIVATE_KEY.encode(), verify_host_key=False, logger=None
    )
    mock_client.get.assert_called_once_with(MACHINE_ID)
    ssh.close.assert_called_once_with()
    mock_client.close.assert_called_once_with()


def test_remote_command_honours_strict_host_key_checking(options, mock_client, client_factory):
    import dataclasses

    options = dataclasses.replace(options, strict_host_key_checking=True)
    mock_client.get.return_value = INSTANCE
    ssh, _ = _fake_ssh()
    ssh_factory = MagicMock(return_value=ssh)

    RemoteCommand(options, command="true", stdout=io.BytesIO(), stderr=io.BytesIO(),
                  client_factory=client_factory, ssh_factory=ssh_factory).run()

    assert ssh_factory.call_args.kwargs["verify_host_key"] is True


def test_remote_command_missing_instance(options, mock_client, client_factory):
    mock_client.get.return_value = None
    ssh_factory = MagicMock()

    with pytest.raises(VMNotFoundError):
        RemoteCommand(options, command="true", client_factory=client_factory,
                      ssh_factory=ssh_factory).run()

    ssh_factory.assert_not_called()
    mock_client.close.assert_called_once_with()


def test_remote_command_without_address(options, mock_client, client_factory):
    mock_client.get.return_value = {"name": MACHINE_ID, "networkInterfaces": []}

    with pytest.raises(RemoteShellError, match="resolve address"):
        RemoteCommand(options, command="true", client_factory=client_factory,
                      ssh_factory=MagicMock()).run()


def test_remote_command_closes_ssh_on_failure(options, mock_client, client_factory):
    mock_client.get.return_value = INSTANCE
    ssh = MagicMock()
    ssh.get_transport.return_value.open_session.side_effect = OSError("channel failed")

    with pytest.raises(OSError):
        RemoteCommand(options, command="true", client_factory=client_factory,
                      ssh_factory=MagicMock(return_value=ssh)).run()

    ssh.close.assert_called_once_with()
