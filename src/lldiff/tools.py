"""External binary wrapper.

Every external program the pipeline shells out to (the data tool, the diff
renderer) goes through ExternalTool, so stages can be tested against a fake
with the same two methods.

Usage:
    silicon = ExternalTool("silicon")
    if silicon.locate():
        result = silicon.run(["-l", "diff", "-o", "out.jpg"], input_text=diff)
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from lldiff.errors import ToolNotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one tool invocation."""

    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ExternalTool:
    """A binary on PATH or at an explicit path.

    Args:
        path: Executable name or path
        name: Display name for logs (default: basename of path)
    """

    def __init__(self, path: str, name: str | None = None) -> None:
        self.path = path
        self.name = name or Path(path).name

    def locate(self) -> bool:
        """True if the binary is on PATH or is an executable file."""
        if shutil.which(self.path):
            return True
        return os.path.isfile(self.path) and os.access(self.path, os.X_OK)

    def run(
        self,
        args: list[str],
        input_text: str | None = None,
        cwd: Path | None = None,
    ) -> ToolResult:
        """Run the tool to completion.

        Args:
            args: Arguments after the executable
            input_text: Text piped to stdin
            cwd: Working directory

        Returns:
            ToolResult with exit code and captured output

        Raises:
            ToolNotFound: If the binary cannot be executed at all
        """
        cmd = [self.path, *args]
        logger.debug("Running: %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                input=input_text,
                capture_output=True,
                text=True,
                cwd=cwd,
                check=False,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise ToolNotFound(self.name) from e

        return ToolResult(exit_code=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)
