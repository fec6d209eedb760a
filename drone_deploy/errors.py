"""Error types raised while resolving and uploading artifacts."""
from typing import Optional


class DeployError(RuntimeError):
    """Base class for all deploy failures."""


class MissingCoordinate(DeployError):
    """Raised when a file has no embedded pom.xml and skipping is disabled."""


class ArchiveError(DeployError):
    """Raised when a file cannot be read as a zip archive."""


class DescriptorParseError(DeployError):
    """Raised when an embedded pom.xml is not well-formed XML."""


class MalformedDescriptor(DeployError):
    """Raised when a pom.xml lacks groupId, artifactId or version."""


class TransportError(DeployError):
    """Raised when the repository rejects or fails an upload."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        artifact: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.artifact = artifact
