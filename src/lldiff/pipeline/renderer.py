"""DiffRenderer — turn each changed file's diff into an image.

For every path (in change-set order) the unified diff of the last commit is
piped into the renderer with diff highlighting. Successful images are
optionally uploaded; a failed upload only means the notify stage falls
back to a local file reference. Per-file failures never stop the loop.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from lldiff.clients import DufsUploader
from lldiff.config import Settings, settings as default_settings
from lldiff.errors import ToolNotFound
from lldiff.tools import ExternalTool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedImage:
    """One rendered diff image."""

    source_path: str
    image_path: Path
    remote_uri: str | None = None

    @property
    def reference(self) -> str:
        """Remote URI if uploaded, else a file:// reference.

        The file:// form only works when the messaging backend shares this
        machine's filesystem.
        """
        if self.remote_uri:
            return self.remote_uri
        return self.image_path.resolve().as_uri()


def image_filename(source_path: str) -> str:
    """Deterministic image name for a data file."""
    return f"{Path(source_path).name}.jpg"


class DiffRenderer:
    """Renders per-file diffs to images and optionally uploads them.

    Args:
        diff_source: Callable returning the unified diff text for a path
        tool: Renderer wrapper (default: from settings.silicon_path)
        uploader: Optional uploader (default: built from settings.dufs_url)
        config: Settings override
    """

    def __init__(
        self,
        diff_source: Callable[[str], str],
        tool: ExternalTool | None = None,
        uploader: DufsUploader | None = None,
        config: Settings | None = None,
    ) -> None:
        self.config = config or default_settings
        self.diff_source = diff_source
        self.tool = tool or ExternalTool(self.config.silicon_path, name="silicon")
        if uploader is None and self.config.dufs_url:
            uploader = DufsUploader(
                base_url=self.config.dufs_url,
                path=self.config.dufs_path,
                user=self.config.dufs_user,
                password=self.config.dufs_pass,
            )
        self.uploader = uploader
        self.output_dir = self.config.resolved_output_dir
        self.failed: list[str] = []

    def render(self, changed: list[str]) -> dict[str, RenderedImage]:
        """Render every changed path.

        Args:
            changed: Change set, in notification order

        Returns:
            Mapping source path -> RenderedImage, insertion-ordered like
            ``changed``; paths that were skipped or failed are absent

        Raises:
            ToolNotFound: Renderer binary missing
        """
        logger.info("=== Image Generation ===")
        self.failed = []

        if not changed:
            logger.info("No changed data files to process. Skipping image generation.")
            return {}

        self.output_dir.mkdir(parents=True, exist_ok=True)

        if not self.tool.locate():
            logger.error("%s not found at: %s", self.tool.name, self.tool.path)
            raise ToolNotFound(self.tool.name)

        images: dict[str, RenderedImage] = {}
        if self.uploader is not None:
            with self.uploader:
                for path in changed:
                    self._render_one(path, images)
        else:
            for path in changed:
                self._render_one(path, images)

        logger.info("Image generation complete. Success: %d / %d", len(images), len(changed))
        if self.failed:
            logger.warning("Failed files: %s", " ".join(self.failed))
        return images

    def _render_one(self, path: str, images: dict[str, RenderedImage]) -> None:
        out_path = self.output_dir / image_filename(path)
        logger.info("Generating image for: %s -> %s", path, out_path)

        diff_text = self.diff_source(path)
        if not diff_text.strip():
            logger.warning("No diff content for %s (possibly new file with no prior commit). Skipping.", path)
            return

        args = [
            "-l", "diff",
            "-f", self.config.render_font,
            "-o", str(out_path),
            "--window-title", path,
        ]
        out_path.unlink(missing_ok=True)
        try:
            result = self.tool.run(args, input_text=diff_text)
        except ToolNotFound as e:
            logger.warning("  Failed to generate image for %s: %s", path, e)
            self.failed.append(path)
            return

        if not result.ok or not out_path.is_file():
            logger.warning(
                "  Failed to generate image for: %s (exit %d) %s",
                path, result.exit_code, result.stderr.strip()[-300:],
            )
            self.failed.append(path)
            return
        logger.info("  Generated: %s", out_path)

        remote_uri = None
        if self.uploader is not None:
            remote_uri = self.uploader.upload(out_path)
            if remote_uri:
                logger.info("  Uploaded: %s", remote_uri)
            else:
                logger.warning("  Upload failed for %s, will fall back to file:// path", path)

        images[path] = RenderedImage(source_path=path, image_path=out_path, remote_uri=remote_uri)
