import subprocess
from importlib import metadata

DISTRIBUTION_NAME = 'fashion-collab'


def _git_version() -> str:
    try:
        output = subprocess.run(
            ['git', 'describe', '--tags', '--always'],
            capture_output=True,
            check=True,
            text=True,
        ).stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        return 'unknown'
    return output or 'unknown'


try:
    VERSION = metadata.version(DISTRIBUTION_NAME)
except metadata.PackageNotFoundError:
    VERSION = _git_version()
