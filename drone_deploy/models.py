"""
Models for drone_deploy.

Immutable dataclasses shared by the extractor, the transport and the orchestrator.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


@dataclass(frozen=True)
class Coordinate:
    """Maven group/artifact/version triple identifying an artifact."""
    group: str
    artifact: str
    version: str

    def __str__(self) -> str:
        return f"{self.group}:{self.artifact}:{self.version}"


class ArtifactKind(Enum):
    """Kind of a packaged component archive."""
    BUNDLE = "bundle"
    FEATURE = "feature"


@dataclass(frozen=True)
class Artifact:
    """A build output file with a resolved coordinate."""
    coordinate: Coordinate
    source_file: Path
    kind: ArtifactKind = ArtifactKind.BUNDLE

    @property
    def filename(self) -> str:
        return self.source_file.name

    @property
    def is_feature(self) -> bool:
        return self.kind == ArtifactKind.FEATURE


@dataclass(frozen=True)
class ClassifiedArtifacts:
    """Result of the classification pass, in input order."""
    features: Tuple[Artifact, ...] = ()
    bundles: Tuple[Artifact, ...] = ()
    skipped: Tuple[Path, ...] = ()

    @property
    def total(self) -> int:
        return len(self.features) + len(self.bundles)


class DeployStatus(Enum):
    """Deploy run status."""
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class DeployResult:
    """Immutable outcome of a deploy run."""
    status: DeployStatus = DeployStatus.SUCCESS
    error: Optional[str] = None
    phase: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == DeployStatus.SUCCESS

    @classmethod
    def ok(cls):
        return cls(status=DeployStatus.SUCCESS)

    @classmethod
    def fail(cls, error: str, phase: Optional[str] = None):
        return cls(status=DeployStatus.FAILED, error=error, phase=phase)


@dataclass(frozen=True)
class DeployConfig:
    """Immutable configuration for a deploy run."""
    host: str
    channel: str
    key: str = field(repr=False, default="")
    port: int = 8080
    upload_poms: bool = False
    skip_unparseable_files: bool = False
    timeout: float = 60.0  # seconds per transport call

    @property
    def base_url(self) -> str:
        host = self.host.rstrip("/")
        if "://" not in host:
            host = f"http://{host}"
        return f"{host}:{self.port}"
