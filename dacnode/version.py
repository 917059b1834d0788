"""Build and version information."""

from __future__ import annotations

import platform
from typing import TextIO

VERSION = "v0.1.0"
GIT_REV = "undefined"
GIT_BRANCH = "undefined"
BUILD_DATE = "Fri, 17 Jun 1988 01:58:00 +0200"


def print_version(stream: TextIO) -> None:
    """Write version information to the stream."""
    os_name = platform.system().lower()
    arch = platform.machine().lower()
    stream.write(f"Version:      {VERSION}\n")
    stream.write(f"Git revision: {GIT_REV}\n")
    stream.write(f"Git branch:   {GIT_BRANCH}\n")
    stream.write(f"Runtime:      Python {platform.python_version()}\n")
    stream.write(f"Built:        {BUILD_DATE}\n")
    stream.write(f"OS/Arch:      {os_name}/{arch}\n")