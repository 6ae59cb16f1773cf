"""ChangeTracker — commit the refreshed snapshot and list what changed.

Stages root data files (never the scratch, output or tooling directories),
commits them with the resource version as message, pushes, then reads the
changed paths back from the new commit. Diffing HEAD~1..HEAD rather than
the index gives exactly the paths that entered history.
"""

import logging
from datetime import datetime
from pathlib import Path

from git import Repo
from git.exc import GitCommandError

from lldiff.config import Settings, settings as default_settings
from lldiff.pipeline.versions import VersionPair

logger = logging.getLogger(__name__)


class ChangeTracker:
    """Git operations on the tracked data repository.

    Usage:
        tracker = ChangeTracker()
        changed = tracker.commit_and_detect(versions)
        diff_text = tracker.file_diff(changed[0])
    """

    def __init__(self, repo_root: Path | None = None, config: Settings | None = None) -> None:
        self.config = config or default_settings
        self.repo = Repo(repo_root or self.config.repo_root)

    @property
    def pathspecs(self) -> list[str]:
        """Data-file pathspec with the excluded directories subtracted."""
        return [f"*{self.config.data_extension}"] + [
            f":!{d}/" for d in self.config.excluded_dir_names
        ]

    def _stage(self) -> bool:
        """Stage data files; True if anything is staged afterwards."""
        try:
            self.repo.git.add("--", *self.pathspecs)
        except GitCommandError as e:
            # No matching files at all is reported as an error by git add
            logger.warning("git add matched nothing: %s", e.stderr.strip() if e.stderr else e)
        try:
            staged = self.repo.git.diff("--cached", "--name-only")
        except GitCommandError as e:
            logger.warning("Could not inspect the index: %s", e)
            return False
        return bool(staged.strip())

    @staticmethod
    def commit_message(versions: VersionPair | None) -> str:
        """Resource version, or a timestamped fallback."""
        if versions and versions.resource_version:
            return versions.resource_version
        return f"update: {datetime.now().strftime('%Y%m%d %H:%M:%S')}"

    def commit_and_detect(self, versions: VersionPair | None = None) -> list[str]:
        """Stage, commit, push and return the committed data-file paths.

        Never raises for git failures: a failed commit yields an empty
        change set, a failed push is logged and detection continues.

        Args:
            versions: Resolved versions (resource version is the message)

        Returns:
            Changed paths in git's diff order (empty if nothing staged)
        """
        logger.info("=== Git Commit / Push ===")

        if not self._stage():
            logger.info("No data file changes staged. Skipping git commit.")
            return []

        message = self.commit_message(versions)
        try:
            self.repo.git.commit("-m", message)
        except GitCommandError as e:
            logger.error("git commit failed: %s", e)
            return []
        logger.info("Committed: %s", message)

        try:
            self.repo.git.push()
            logger.info("Pushed to remote.")
        except GitCommandError as e:
            logger.warning("git push failed: %s", e)

        changed = self.last_commit_changes()
        if not changed:
            logger.info("No data files changed in this commit.")
        else:
            logger.info("Changed data files (%d):", len(changed))
            for path in changed:
                logger.info("  - %s", path)
        return changed

    def last_commit_changes(self) -> list[str]:
        """Data-file paths changed between HEAD~1 and HEAD."""
        try:
            output = self.repo.git.diff("--name-only", "HEAD~1", "HEAD", "--", *self.pathspecs)
        except GitCommandError as e:
            logger.warning("Could not diff HEAD~1..HEAD: %s", e)
            return []
        return [line for line in output.splitlines() if line.strip()]

    def file_diff(self, path: str) -> str:
        """Unified diff of one path between HEAD~1 and HEAD ("" if none)."""
        try:
            return self.repo.git.diff("HEAD~1", "HEAD", "--", path)
        except GitCommandError as e:
            logger.warning("git diff failed for %s: %s", path, e)
            return ""
