"""DevPod GCloud Provider - run DevPod workspaces on Google Compute Engine.

The host orchestrator calls this CLI as a provider plugin. Each invocation
performs one operation on one instance and exits:

- init: check credentials, project and zone
- create / delete / start / stop: instance lifecycle
- status: report Running, Stopped, Busy or NotFound
- command: run DEVPOD_COMMAND on the instance over SSH

Configuration comes from environment variables (see core.config).

Example usage:
    >>> from devpod_gcloud.core.config import ProviderOptions
    >>> from devpod_gcloud.commands import StopCommand
    >>> StopCommand(ProviderOptions.from_env()).run()
"""

from devpod_gcloud.core.config import VERSION

__version__ = VERSION
