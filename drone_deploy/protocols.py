"""
Protocols (Interfaces) for Dependency Inversion.

The orchestrator only depends on these; tests inject fakes.
"""
from pathlib import Path
from typing import Any, AsyncIterable, Dict, Optional, Protocol, Sequence, Union, runtime_checkable

from .models import Artifact, ArtifactKind


@runtime_checkable
class IArtifactInspector(Protocol):
    """Interface for artifact type classification."""

    def detect_kind(self, path: Path) -> ArtifactKind:
        """Classify a jar as feature or bundle."""
        ...


@runtime_checkable
class ITransport(Protocol):
    """Interface for repository uploads."""

    def feature_has_artifact(self, feature: Artifact, bundle: Artifact) -> bool:
        """Whether the feature packages the bundle."""
        ...

    async def upload_feature(
        self,
        feature: Artifact,
        candidate_bundles: Sequence[Artifact],
    ) -> Any:
        """Upload a feature; candidate bundles are the ones still standalone."""
        ...

    async def upload_artifact(self, artifact: Artifact) -> Any:
        """Upload a single bundle."""
        ...


@runtime_checkable
class IAPIClient(Protocol):
    """Interface for raw repository API operations."""

    async def put(
        self,
        endpoint: str,
        content: Union[bytes, AsyncIterable[bytes]],
        params: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """PUT request to API."""
        ...
