"""Unit tests for the provider commands against a mock compute client."""

import dataclasses

import pytest
from googleapiclient.errors import HttpError

from conftest import FAKE_PUBLIC_KEY, MACHINE_ID, PROJECT, ZONE, make_http_error
from devpod_gcloud.commands import (
    COMMANDS,
    CreateCommand,
    DeleteCommand,
    InitCommand,
    StartCommand,
    StatusCommand,
    StopCommand,
)
from devpod_gcloud.commands.create import CLOUD_PLATFORM_SCOPE, build_instance_body
from devpod_gcloud.commands.status import to_devpod_status
from devpod_gcloud.core.exceptions import KeyBootstrapError

OPERATIONS = ("create", "delete", "start", "stop", "get", "check_zone")

LIFECYCLE = [
    (CreateCommand, "create"),
    (DeleteCommand, "delete"),
    (StartCommand, "start"),
    (StopCommand, "stop"),
]


# ── Lifecycle commands ────────────────────────────────────────────


@pytest.mark.parametrize("command_class, method", LIFECYCLE)
def test_lifecycle_command_calls_only_its_operation(options, mock_client, client_factory,
                                                    command_class, method):
    command_class(options, client_factory=client_factory).run()

    assert client_factory.calls == [(PROJECT, ZONE)]
    operation = getattr(mock_client, method)
    operation.assert_called_once()
    assert operation.call_args.args[0] == MACHINE_ID
    for other in OPERATIONS:
        if other != method:
            getattr(mock_client, other).assert_not_called()
    mock_client.close.assert_called_once_with()


@pytest.mark.parametrize("command_class, method", LIFECYCLE)
def test_lifecycle_command_propagates_api_error(options, mock_client, client_factory,
                                                command_class, method):
    error = make_http_error(409, "conflict")
    getattr(mock_client, method).side_effect = error

    with pytest.raises(HttpError) as exc_info:
        command_class(options, client_factory=client_factory).run()

    assert exc_info.value is error
    getattr(mock_client, method).assert_called_once()
    for other in OPERATIONS:
        if other != method:
            getattr(mock_client, other).assert_not_called()
    # The client is still released
    mock_client.close.assert_called_once_with()


def test_commands_registry_maps_verbs():
    assert COMMANDS["create"] is CreateCommand
    assert COMMANDS["delete"] is DeleteCommand
    assert COMMANDS["start"] is StartCommand
    assert COMMANDS["stop"] is StopCommand


def test_command_logs_through_injected_logger(options, client_factory, caplog, logger):
    with caplog.at_level("INFO", logger=logger.name):
        StopCommand(options, logger=logger, client_factory=client_factory).run()

    assert f"Instance {MACHINE_ID} stopped" in caplog.text


# ── Create ────────────────────────────────────────────────────────


def test_create_injects_public_key(options, mock_client, client_factory):
    CreateCommand(options, client_factory=client_factory).run()

    machine_id, body = mock_client.create.call_args.args
    assert machine_id == MACHINE_ID
    assert body["name"] == MACHINE_ID
    items = body["metadata"]["items"]
    assert items == [{"key": "ssh-keys", "value": f"devpod:{FAKE_PUBLIC_KEY.strip()}"}]


def test_create_bootstraps_missing_keys(options, mock_client, client_factory, tmp_path):
    folder = tmp_path / "fresh"
    options = dataclasses.replace(options, machine_folder=str(folder))

    CreateCommand(options, client_factory=client_factory).run()

    public_key = (folder / "id_devpod_rsa.pub").read_text()
    _, body = mock_client.create.call_args.args
    assert body["metadata"]["items"][0]["value"] == f"devpod:{public_key.strip()}"


def test_create_key_failure_makes_no_api_call(options, mock_client, client_factory, tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    options = dataclasses.replace(options, machine_folder=str(blocker / "keys"))

    with pytest.raises(KeyBootstrapError):
        CreateCommand(options, client_factory=client_factory).run()

    mock_client.create.assert_not_called()
    mock_client.close.assert_called_once_with()


def test_build_instance_body_defaults(options):
    body = build_instance_body(options, FAKE_PUBLIC_KEY)

    assert body["machineType"] == f"zones/{ZONE}/machineTypes/c2-standard-4"
    disk = body["disks"][0]
    assert disk["boot"] is True
    assert disk["autoDelete"] is True
    assert disk["initializeParams"]["diskSizeGb"] == "40"
    assert disk["initializeParams"]["sourceImage"] == options.disk_image
    assert body["networkInterfaces"] == [
        {"accessConfigs": [{"name": "External NAT", "type": "ONE_TO_ONE_NAT"}]}
    ]
    assert body["labels"] == {"devpod": "true"}
    assert "tags" not in body
    assert "serviceAccounts" not in body


def test_build_instance_body_custom(options):
    options = dataclasses.replace(
        options,
        machine_type="e2-standard-8",
        disk_size=100,
        network="dev",
        subnetwork="dev-sub",
        tags=("ssh", "devpod"),
        service_account="sa@my-project.iam.gserviceaccount.com",
        public_ip_enabled=False,
    )

    body = build_instance_body(options, FAKE_PUBLIC_KEY)

    assert body["machineType"] == f"zones/{ZONE}/machineTypes/e2-standard-8"
    assert body["disks"][0]["initializeParams"]["diskSizeGb"] == "100"
    assert body["networkInterfaces"] == [{
        "network": f"projects/{PROJECT}/global/networks/dev",
        "subnetwork": f"projects/{PROJECT}/regions/us-central1/subnetworks/dev-sub",
    }]
    assert body["tags"] == {"items": ["ssh", "devpod"]}
    assert body["serviceAccounts"] == [{
        "email": "sa@my-project.iam.gserviceaccount.com",
        "scopes": [CLOUD_PLATFORM_SCOPE],
    }]


def test_build_instance_body_keeps_network_urls(options):
    network = "projects/shared-vpc/global/networks/corp"
    options = dataclasses.replace(options, network=network)

    body = build_instance_body(options, FAKE_PUBLIC_KEY)

    assert body["networkInterfaces"][0]["network"] == network


# ── Status ────────────────────────────────────────────────────────


@pytest.mark.parametrize("gce_status, expected", [
    ("RUNNING", "Running"),
    ("TERMINATED", "Stopped"),
    ("STOPPED", "Stopped"),
    ("SUSPENDED", "Stopped"),
    ("PROVISIONING", "Busy"),
    ("STAGING", "Busy"),
    ("STOPPING", "Busy"),
    ("SUSPENDING", "Busy"),
    ("REPAIRING", "Busy"),
])
def test_to_devpod_status(gce_status, expected):
    assert to_devpod_status(gce_status) == expected


def test_status_command(options, mock_client, client_factory):
    mock_client.get.return_value = {"name": MACHINE_ID, "status": "RUNNING"}

    assert StatusCommand(options, client_factory=client_factory).run() == "Running"
    mock_client.get.assert_called_once_with(MACHINE_ID)
    mock_client.close.assert_called_once_with()


def test_status_command_not_found(options, mock_client, client_factory):
    mock_client.get.return_value = None

    assert StatusCommand(options, client_factory=client_factory).run() == "NotFound"


# ── Init ──────────────────────────────────────────────────────────


def test_init_checks_zone(options, mock_client, client_factory):
    mock_client.check_zone.return_value = {"name": ZONE, "status": "UP"}

    InitCommand(options, client_factory=client_factory).run()

    mock_client.check_zone.assert_called_once_with()
    for other in ("create", "delete", "start", "stop", "get"):
        getattr(mock_client, other).assert_not_called()


def test_init_propagates_errors(options, mock_client, client_factory):
    mock_client.check_zone.side_effect = make_http_error(404, "zone not found")

    with pytest.raises(HttpError):
        InitCommand(options, client_factory=client_factory).run()
