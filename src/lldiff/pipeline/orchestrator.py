"""Orchestrator — main pipeline coordinator.

Full run:
  VersionResolver → SnapshotUpdater → ChangeTracker
    → (non-empty change set) DiffRenderer → NotificationBatcher

Each stage runs only after the previous one finished, and only when its
input is non-empty. All run state lives on a PipelineState owned by the
orchestrator and handed to each stage in turn.

Usage:
    orchestrator = Orchestrator()
    state = orchestrator.run()
    print(state.changed, [r.message_id for r in state.messages])
"""

import logging
from dataclasses import dataclass, field

from lldiff.clients import DufsUploader
from lldiff.config import Settings, settings as default_settings
from lldiff.pipeline.notifier import MessageRecord, NotificationBatcher
from lldiff.pipeline.renderer import DiffRenderer, RenderedImage, image_filename
from lldiff.pipeline.snapshot import SnapshotUpdater
from lldiff.pipeline.tracker import ChangeTracker
from lldiff.pipeline.versions import VersionPair, VersionResolver

logger = logging.getLogger(__name__)


@dataclass
class PipelineState:
    """Everything one run produces, in stage order."""

    versions: VersionPair | None = None
    synced_files: int = 0
    changed: list[str] = field(default_factory=list)
    images: dict[str, RenderedImage] = field(default_factory=dict)
    messages: list[MessageRecord] = field(default_factory=list)


class Orchestrator:
    """Main pipeline orchestrator.

    Every stage can be injected; defaults are built from settings. The
    change tracker is created on first use so update-only runs work
    outside a git checkout.
    """

    def __init__(
        self,
        config: Settings | None = None,
        resolver: VersionResolver | None = None,
        updater: SnapshotUpdater | None = None,
        tracker: ChangeTracker | None = None,
        renderer: DiffRenderer | None = None,
        notifier: NotificationBatcher | None = None,
    ) -> None:
        self.config = config or default_settings
        self.resolver = resolver or VersionResolver(config=self.config)
        self.updater = updater or SnapshotUpdater(config=self.config)
        self.notifier = notifier or NotificationBatcher(config=self.config)
        self._tracker = tracker
        self._renderer = renderer
        self.state = PipelineState()

    @property
    def tracker(self) -> ChangeTracker:
        if self._tracker is None:
            self._tracker = ChangeTracker(config=self.config)
        return self._tracker

    @property
    def renderer(self) -> DiffRenderer:
        if self._renderer is None:
            self._renderer = DiffRenderer(diff_source=self.tracker.file_diff, config=self.config)
        return self._renderer

    def run(self) -> PipelineState:
        """Run all four stages.

        Raises:
            ToolNotFound, ToolExecutionFailed, VersionUnavailable,
            ConfigMissing: Fatal; later stages do not run
            BackendRejected, NetworkFailure: The forward call failed
        """
        self.state = PipelineState()
        self.run_update()
        self._git_stage()

        if not self.state.changed:
            logger.info("No data changes detected. Done.")
            return self.state

        self.state.images = self.renderer.render(self.state.changed)
        self._notify_stage()
        return self.state

    def run_update(self) -> PipelineState:
        """Resolve versions and regenerate the snapshot."""
        logger.info("=== Data Update ===")
        # Fail on a missing tool before any network traffic
        self.updater.check_tool()
        self.state.versions = self.resolver.resolve()
        self.state.synced_files = self.updater.update(self.state.versions)
        return self.state

    def run_git(self) -> PipelineState:
        """Commit/push/detect only (commit message falls back to a timestamp)."""
        return self._git_stage()

    def run_images(self) -> PipelineState:
        """Render images for the files changed by the last commit."""
        self.state.changed = self.tracker.last_commit_changes()
        self.state.images = self.renderer.render(self.state.changed)
        return self.state

    def run_notify(self) -> PipelineState:
        """Notify about the last commit using images already on disk."""
        self.notifier.check_config()
        self.state.changed = self.tracker.last_commit_changes()
        self.state.versions = self.resolver.resolve()
        self.state.images = self.collect_existing_images(self.state.changed)
        self._notify_stage()
        return self.state

    def collect_existing_images(self, changed: list[str]) -> dict[str, RenderedImage]:
        """Images from an earlier render run, found by their deterministic names.

        With an upload server configured the reference is the URL the
        image was uploaded to.
        """
        uploader = None
        if self.config.dufs_url:
            uploader = DufsUploader(base_url=self.config.dufs_url, path=self.config.dufs_path)

        images: dict[str, RenderedImage] = {}
        for path in changed:
            name = image_filename(path)
            image_path = self.config.resolved_output_dir / name
            if not image_path.is_file():
                logger.warning("Image not found for %s (%s), skipping.", path, image_path)
                continue
            images[path] = RenderedImage(
                source_path=path,
                image_path=image_path,
                remote_uri=uploader.remote_url(name) if uploader else None,
            )
        return images

    def _git_stage(self) -> PipelineState:
        self.state.changed = self.tracker.commit_and_detect(self.state.versions)
        return self.state

    def _notify_stage(self) -> None:
        self.state.messages = self.notifier.notify(
            self.state.versions, self.state.changed, self.state.images,
        )
