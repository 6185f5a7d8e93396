"""
DevPod GCloud Provider - SSH Key Bootstrap

Keeps one RSA key pair per machine folder. The pair is generated on first
use and read back on every later request.

Layout:
    <dir>/id_devpod_rsa       PEM "RSA PRIVATE KEY", mode 0600
    <dir>/id_devpod_rsa.pub   "ssh-rsa AAAA...", mode 0644

The private key file existing is the only check. A corrupted or mismatched
pair is never regenerated.
"""

import contextlib
import fcntl
import io
import os

import paramiko

from devpod_gcloud.core.exceptions import KeyBootstrapError

PRIVATE_KEY_FILE = 'id_devpod_rsa'
PUBLIC_KEY_FILE = 'id_devpod_rsa.pub'

KEY_BITS = 2048

DIR_MODE = 0o755
PRIVATE_KEY_MODE = 0o600
PUBLIC_KEY_MODE = 0o644


def get_private_key(directory: str) -> bytes:
    """
    Return the private key file content, creating the pair if needed.

    The bytes are returned exactly as stored; parsing is left to the SSH client.

    Raises:
        KeyBootstrapError: If the pair can't be prepared or the file can't be read
    """
    ensure_key_pair(directory)
    return _read_bytes(os.path.join(directory, PRIVATE_KEY_FILE), 'read private ssh key')


def get_public_key(directory: str) -> str:
    """
    Return the authorized_keys line stored in directory, creating the pair if needed.

    Raises:
        KeyBootstrapError: If the pair can't be prepared or the file can't be read
    """
    ensure_key_pair(directory)
    return _read(os.path.join(directory, PUBLIC_KEY_FILE), 'read public ssh key')


def ensure_key_pair(directory: str) -> bool:
    """
    Make sure directory exists and holds a key pair.

    Generation runs under an exclusive lock on the directory, so concurrent
    callers produce at most one pair.

    Args:
        directory: Key directory (created with mode 0755 if missing)

    Returns:
        True if a new pair was generated, False if one already existed

    Raises:
        KeyBootstrapError: On directory, generation or write failures
    """
    try:
        created = not os.path.isdir(directory)
        os.makedirs(directory, mode=DIR_MODE, exist_ok=True)
        if created:
            # makedirs applies the umask
            os.chmod(directory, DIR_MODE)
    except OSError as e:
        raise KeyBootstrapError('create key directory', e) from e

    private_key_file = os.path.join(directory, PRIVATE_KEY_FILE)
    public_key_file = os.path.join(directory, PUBLIC_KEY_FILE)

    with _locked(directory):
        if os.path.exists(private_key_file):
            return False

        try:
            private_key, public_key = generate_rsa_key_pair()
        except Exception as e:
            raise KeyBootstrapError('generate key pair', e) from e

        # Public half first: a present private key implies a complete pair
        _write(public_key_file, public_key, PUBLIC_KEY_MODE, 'write public ssh key')
        _write(private_key_file, private_key, PRIVATE_KEY_MODE, 'write private ssh key')

    return True


def generate_rsa_key_pair(bits: int = KEY_BITS):
    """
    Generate a new RSA key pair.

    Returns:
        tuple: (private_key, public_key)
            - private_key: PEM "RSA PRIVATE KEY" block
            - public_key: authorized_keys line ending with a newline
    """
    key = paramiko.RSAKey.generate(bits)

    buf = io.StringIO()
    key.write_private_key(buf)

    return buf.getvalue(), authorized_key(key)


def authorized_key(key: paramiko.PKey) -> str:
    """Format a key in authorized_keys format ("<type> <base64>\\n")."""
    return f"{key.get_name()} {key.get_base64()}\n"


@contextlib.contextmanager
def _locked(directory: str):
    """Hold an exclusive flock on the directory itself."""
    try:
        fd = os.open(directory, os.O_RDONLY)
    except OSError as e:
        raise KeyBootstrapError('lock key directory', e) from e

    try:
        fcntl.flock(fd, fcntl.LOCK_EX)
        yield
    finally:
        # closing the descriptor releases the lock
        os.close(fd)


def _write(path: str, content: str, mode: int, stage: str):
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, 'w') as f:
            f.write(content)
        # umask may have narrowed the mode on creation
        os.chmod(path, mode)
    except OSError as e:
        raise KeyBootstrapError(stage, e) from e


def _read(path: str, stage: str) -> str:
    try:
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise KeyBootstrapError(stage, e) from e


def _read_bytes(path: str, stage: str) -> bytes:
    try:
        with open(path, 'rb') as f:
            return f.read()
    except OSError as e:
        raise KeyBootstrapError(stage, e) from e
