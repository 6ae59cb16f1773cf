"""Exception taxonomy for link-like-diff.

Fatal (abort the run, non-zero exit):
    ToolNotFound, ToolExecutionFailed, VersionUnavailable, ConfigMissing

Recoverable per unit (logged, unit skipped):
    NetworkFailure, BackendRejected (on the final forward call either one
    ends the run with an error)
"""


class LinkLikeDiffError(Exception):
    """Base exception for all pipeline errors."""


class ToolNotFound(LinkLikeDiffError):
    """An external binary could not be located or executed."""

    def __init__(self, tool: str) -> None:
        super().__init__(f"{tool} not found (set its *_PATH setting to the correct path)")
        self.tool = tool


class ToolExecutionFailed(LinkLikeDiffError):
    """An external binary exited with a non-zero status."""

    def __init__(self, tool: str, exit_code: int, stderr: str = "") -> None:
        super().__init__(f"{tool} exited with status {exit_code}")
        self.tool = tool
        self.exit_code = exit_code
        self.stderr = stderr


class VersionUnavailable(LinkLikeDiffError):
    """Client or resource version could not be discovered."""


class ConfigMissing(LinkLikeDiffError):
    """Required configuration values are unset."""

    def __init__(self, fields: list[str]) -> None:
        super().__init__(f"Missing required settings: {', '.join(fields)}")
        self.fields = fields


class NetworkFailure(LinkLikeDiffError):
    """HTTP call produced no usable response or an unexpected status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class BackendRejected(LinkLikeDiffError):
    """HTTP call succeeded but the backend's own status signals failure."""

    def __init__(self, message: str, response_body: str | None = None) -> None:
        super().__init__(message)
        self.response_body = response_body
