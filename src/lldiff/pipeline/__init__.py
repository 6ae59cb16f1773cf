"""Pipeline orchestration — versions → snapshot → git → images → notify.

Components:
- VersionResolver: client/resource version discovery
- SnapshotUpdater: data tool run + scratch sync
- ChangeTracker: commit, push, changed-file detection
- DiffRenderer: per-file diff images (+ optional upload)
- NotificationBatcher: private messages + group forward bundle
- Orchestrator: main coordinator
"""

from lldiff.pipeline.notifier import MessageRecord, MessageRole, NotificationBatcher
from lldiff.pipeline.orchestrator import Orchestrator, PipelineState
from lldiff.pipeline.renderer import DiffRenderer, RenderedImage
from lldiff.pipeline.snapshot import SnapshotUpdater
from lldiff.pipeline.tracker import ChangeTracker
from lldiff.pipeline.versions import VersionPair, VersionResolver

__all__ = [
    "ChangeTracker",
    "DiffRenderer",
    "MessageRecord",
    "MessageRole",
    "NotificationBatcher",
    "Orchestrator",
    "PipelineState",
    "RenderedImage",
    "SnapshotUpdater",
    "VersionPair",
    "VersionResolver",
]
