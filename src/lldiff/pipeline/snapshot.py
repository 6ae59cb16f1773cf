"""SnapshotUpdater — regenerate the master-data snapshot.

Runs the data tool with the resolved versions, then moves every data file
from its scratch output directory into the tracked root and removes the
scratch directory.
"""

import logging
import shutil

from lldiff.config import Settings, settings as default_settings
from lldiff.errors import ToolExecutionFailed, ToolNotFound
from lldiff.pipeline.versions import VersionPair
from lldiff.tools import ExternalTool

logger = logging.getLogger(__name__)


class SnapshotUpdater:
    """Drives the data tool and syncs its output into the tracked tree.

    Args:
        tool: Data tool wrapper (default: from settings.hailstorm_path)
        config: Settings override
    """

    def __init__(
        self,
        tool: ExternalTool | None = None,
        config: Settings | None = None,
    ) -> None:
        self.config = config or default_settings
        self.tool = tool or ExternalTool(self.config.hailstorm_path, name="hailstorm")

    def check_tool(self) -> None:
        """Raise ToolNotFound unless the data tool can be located."""
        if not self.tool.locate():
            logger.error("%s not found at: %s", self.tool.name, self.tool.path)
            raise ToolNotFound(self.tool.name)

    def update(self, versions: VersionPair) -> int:
        """Run the data tool and sync its output.

        Args:
            versions: Resolved client/resource versions

        Returns:
            Number of data files copied into the tracked root

        Raises:
            ToolNotFound: Data tool missing
            ToolExecutionFailed: Data tool exited non-zero
        """
        self.check_tool()

        args = [
            "--dbonly",
            "--client-version", versions.client_version,
            "--res-info", versions.resource_version,
        ]
        logger.info("Running: %s %s", self.tool.path, " ".join(args))
        result = self.tool.run(args, cwd=self.config.repo_root)
        if result.stdout:
            logger.debug("%s stdout:\n%s", self.tool.name, result.stdout.rstrip())
        if not result.ok:
            logger.error(
                "%s exited with status %d: %s",
                self.tool.name, result.exit_code, result.stderr.strip()[-500:],
            )
            raise ToolExecutionFailed(self.tool.name, result.exit_code, result.stderr)

        logger.info("%s update complete.", self.tool.name)
        return self.sync_scratch()

    def sync_scratch(self) -> int:
        """Copy scratch data files into the root, then delete the scratch dir.

        Returns:
            Number of files copied (0 if the scratch dir is absent)
        """
        root = self.config.repo_root
        scratch = root / self.config.scratch_dir
        if not scratch.is_dir():
            logger.warning("%s/ directory not found after %s run.", self.config.scratch_dir, self.tool.name)
            return 0

        count = 0
        for src in sorted(scratch.glob(f"*{self.config.data_extension}")):
            if not src.is_file():
                continue
            shutil.copyfile(src, root / src.name)
            count += 1

        logger.info("Synced %d data files to repo root.", count)
        shutil.rmtree(scratch)
        logger.info("Removed %s/ directory.", self.config.scratch_dir)
        return count
