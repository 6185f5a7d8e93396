"""
DevPod GCloud Provider - Commands Module

One command object per provider verb. Each opens a compute client,
performs its operation and closes the client.

Usage:
    from devpod_gcloud.commands import COMMANDS

    command = COMMANDS['stop'](options, logger=logger)
    command.run()
"""

from devpod_gcloud.commands.base import BaseCommand
from devpod_gcloud.commands.command import RemoteCommand
from devpod_gcloud.commands.create import CreateCommand
from devpod_gcloud.commands.delete import DeleteCommand
from devpod_gcloud.commands.init import InitCommand
from devpod_gcloud.commands.start import StartCommand
from devpod_gcloud.commands.status import StatusCommand
from devpod_gcloud.commands.stop import StopCommand

# Verbs that take nothing but the provider options
COMMANDS = {
    'init': InitCommand,
    'create': CreateCommand,
    'delete': DeleteCommand,
    'start': StartCommand,
    'stop': StopCommand,
    'status': StatusCommand,
}

__all__ = [
    # Base class
    'BaseCommand',

    # Commands
    'InitCommand',
    'CreateCommand',
    'DeleteCommand',
    'StartCommand',
    'StopCommand',
    'StatusCommand',
    'RemoteCommand',

    'COMMANDS',
]
