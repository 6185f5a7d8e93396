"""
DevPod GCloud Provider - Command Line Interface

The DevPod host runs one verb per process, with the provider options in the
environment:

    devpod-gcloud init
    devpod-gcloud create
    devpod-gcloud start
    devpod-gcloud stop
    devpod-gcloud status
    devpod-gcloud command      (runs $DEVPOD_COMMAND on the instance)
    devpod-gcloud delete

Exit status is 0 on success and non-zero on failure; `command` exits with
the remote command's status.
"""

import argparse
import json
import os
import sys
from typing import Any, Dict, Mapping, Optional

import yaml
from googleapiclient.errors import HttpError

from devpod_gcloud.commands import COMMANDS, RemoteCommand
from devpod_gcloud.core.config import VERSION, ProviderOptions, get_command
from devpod_gcloud.core.exceptions import ProviderError
from devpod_gcloud.utils.logger import setup_logging

PROG = 'devpod-gcloud'


class OutputFormatter:
    """
    Format command results for stdout.

    Supports: value, json, yaml
    """

    @staticmethod
    def format_output(data: Dict[str, Any], format_type: str = 'value', field: str = 'status'):
        """Format output based on format type."""
        if format_type == 'json':
            return json.dumps(data, indent=2)
        elif format_type == 'yaml':
            return yaml.safe_dump(data, default_flow_style=False).rstrip('\n')
        else:
            return str(data.get(field, ''))


def create_parser() -> argparse.ArgumentParser:
    """
    Create argument parser with one subcommand per provider verb.

    Returns:
        Configured ArgumentParser
    """

    parser = argparse.ArgumentParser(
        prog=PROG,
        description='DevPod provider for Google Compute Engine',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
ENVIRONMENT
    PROJECT, ZONE and MACHINE_ID are required. Optional: MACHINE_FOLDER,
    MACHINE_TYPE, DISK_SIZE, DISK_IMAGE, NETWORK, SUBNETWORK, TAGS,
    SERVICE_ACCOUNT, PUBLIC_IP_ENABLED, STRICT_HOST_KEY_CHECKING.

EXAMPLES
    $ PROJECT=my-project ZONE=us-central1-a MACHINE_ID=ws1 devpod-gcloud create
    $ DEVPOD_COMMAND='uname -a' devpod-gcloud command
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'{PROG} v{VERSION}'
    )

    subparsers = parser.add_subparsers(
        dest='command',
        required=True,
        help='Available commands'
    )

    verbs = [
        ('init', 'Check credentials, project and zone'),
        ('create', 'Create the instance'),
        ('delete', 'Delete the instance'),
        ('start', 'Start the instance'),
        ('stop', 'Stop the instance'),
        ('status', 'Print the instance status (Running, Stopped, Busy, NotFound)'),
        ('command', 'Run $DEVPOD_COMMAND on the instance over SSH'),
    ]
    for verb, help_text in verbs:
        verb_parser = subparsers.add_parser(verb, help=help_text, description=help_text)
        _add_common_args(verb_parser)
        if verb == 'status':
            verb_parser.add_argument(
                '--format',
                metavar='FORMAT',
                choices=['value', 'json', 'yaml'],
                default='value',
                help='Output format. One of: value, json, yaml. Default: value'
            )

    return parser


def _add_common_args(parser: argparse.ArgumentParser):
    """Add arguments common to all commands."""
    output = parser.add_argument_group('OUTPUT FLAGS')
    output.add_argument(
        '--verbosity',
        metavar='VERBOSITY',
        choices=['debug', 'info', 'warning', 'error', 'critical'],
        default='info',
        help='Logging verbosity. One of: debug, info, warning, error, critical. Default: info'
    )
    output.add_argument(
        '--log-file',
        metavar='LOG_FILE',
        help='Write logs to this file.'
    )


def handle_status(args, options, logger, client_factory=None, stdout=None) -> int:
    """Handle status command: print the status to stdout."""
    status = COMMANDS['status'](options, logger=logger, client_factory=client_factory).run()

    result = {
        'instanceName': options.machine_id,
        'zone': options.zone,
        'project': options.project,
        'status': status,
    }
    print(OutputFormatter.format_output(result, args.format), file=stdout or sys.stdout)
    return 0


def handle_command(args, options, logger, client_factory=None, environ=None) -> int:
    """Handle command command: exit with the remote exit status."""
    command = RemoteCommand(
        options,
        command=get_command(environ),
        stdin=sys.stdin.buffer,
        stdout=sys.stdout.buffer,
        stderr=sys.stderr.buffer,
        logger=logger,
        client_factory=client_factory,
    )
    return command.run()


def main(argv=None, environ: Optional[Mapping[str, str]] = None,
         client_factory=None, stdout=None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Arguments (default: sys.argv[1:])
        environ: Environment mapping (default: os.environ)
        client_factory: Compute client factory override
        stdout: Stream for command results (default: sys.stdout)

    Returns:
        int: Process exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    debug = args.verbosity == 'debug'
    logger = setup_logging(level=args.verbosity, log_file=args.log_file, debug=debug)

    env = os.environ if environ is None else environ

    try:
        options = ProviderOptions.from_env(env)
        logger.debug(f"Loaded options: {options}")

        if args.command == 'status':
            return handle_status(args, options, logger, client_factory=client_factory, stdout=stdout)
        if args.command == 'command':
            return handle_command(args, options, logger, client_factory=client_factory, environ=env)

        COMMANDS[args.command](options, logger=logger, client_factory=client_factory).run()
        return 0

    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.", file=sys.stderr)
        return 130  # Standard exit code for SIGINT
    except (ProviderError, HttpError) as e:
        print(f"ERROR: ({PROG}) {args.command}: {e}", file=sys.stderr)
        if debug:
            logger.exception("Full traceback:")
        return 1
    except Exception as e:
        print(f"ERROR: ({PROG}) {args.command}: Unexpected error: {str(e)}", file=sys.stderr)
        if debug:
            logger.exception("Full traceback:")
        return 1


def run():
    """Console script entry point."""
    sys.exit(main())


if __name__ == '__main__':
    run()
