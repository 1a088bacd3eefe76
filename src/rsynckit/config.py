# src/rsynckit/config.py
"""
Defaults and process configuration for rsynckit.
"""

import os
import shutil
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Tuple

# Name of the executable used when the caller does not configure one
DEFAULT_EXECUTABLE: str = "rsync"

OutputHandler = Callable[[str], None]


def noop(_chunk: str) -> None:
    """Default output handler; discards the chunk."""


# Valueless rsync options exposed as toggles on the Rsync builder:
# (method name, rsync option)
SHORTHAND_OPTIONS: List[Tuple[str, str]] = [
    ("delete", "delete"),
    ("progress", "progress"),
    ("archive", "a"),
    ("compress", "z"),
    ("recursive", "r"),
    ("update", "u"),
    ("quiet", "q"),
    ("dirs", "d"),
    ("links", "l"),
    ("dry", "n"),
    ("hard_links", "H"),
    ("perms", "p"),
    ("executability", "E"),
    ("group", "g"),
    ("owner", "o"),
    ("acls", "A"),
    ("xattrs", "X"),
    ("devices", "devices"),
    ("specials", "specials"),
    ("times", "t"),
]

# Options holding a single value: (method name, rsync option)
VALUE_OPTIONS: List[Tuple[str, str]] = [
    ("shell", "rsh"),
]

# Options that accumulate every value they are given: (method name, rsync option)
MULTI_OPTIONS: List[Tuple[str, str]] = [
    ("chmod", "chmod"),
]


@dataclass
class ProcessConfig:
    """
    Everything the execution engine needs besides the argument list.

    The environment is a snapshot of the current process taken when the
    config is created, unless one is given. Process-wide defaults travel
    with the builder, so a run never consults global process state.
    """

    executable: str = DEFAULT_EXECUTABLE
    cwd: Optional[str] = None
    env: Dict[str, str] = field(default_factory=lambda: dict(os.environ))
    stdout_handler: OutputHandler = noop
    stderr_handler: OutputHandler = noop

    @classmethod
    def from_environment(
        cls,
        executable: Optional[str] = None,
        cwd: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> "ProcessConfig":
        """Builds a config from the current process, filling only what is not given."""
        env = dict(os.environ if env is None else env)
        if executable is None:
            # Same lookup rsync itself would go through, but done once up front
            executable = shutil.which(DEFAULT_EXECUTABLE, path=env.get("PATH")) or DEFAULT_EXECUTABLE
        return cls(
            executable=executable,
            cwd=os.path.abspath(cwd) if cwd else os.getcwd(),
            env=env,
        )
