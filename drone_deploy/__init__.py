"""
drone_deploy - Upload build output jars to a Package Drone channel.

Features are uploaded first, without the bundles they package, followed by
the remaining standalone bundles. The first failure ends the run.

Usage:
    from drone_deploy import DeployOrchestrator, DeployConfig

    config = DeployConfig(host="drone.example.com", channel="releases", key="...")
    async with DeployOrchestrator(config) as orchestrator:
        result = await orchestrator.run([Path("target/my.feature-1.0.0.jar")])

    if not result.success:
        print(result.error)

    # Coordinate of a single jar
    coordinate = extract_coordinate(Path("target/my.bundle-1.0.0.jar"))
"""
from .errors import (
    ArchiveError,
    DeployError,
    DescriptorParseError,
    MalformedDescriptor,
    MissingCoordinate,
    TransportError,
)
from .models import (
    Artifact,
    ArtifactKind,
    ClassifiedArtifacts,
    Coordinate,
    DeployConfig,
    DeployResult,
    DeployStatus,
)
from .orchestrator import DeployOrchestrator, FileCollector
from .services import ArchiveInspector, HTTPAPIClient, PackageDroneTransport, extract_coordinate

__version__ = "0.1.0"
__all__ = [
    # Main
    "DeployOrchestrator",
    "FileCollector",
    # Models
    "Artifact",
    "ArtifactKind",
    "ClassifiedArtifacts",
    "Coordinate",
    "DeployConfig",
    "DeployResult",
    "DeployStatus",
    # Errors
    "ArchiveError",
    "DeployError",
    "DescriptorParseError",
    "MalformedDescriptor",
    "MissingCoordinate",
    "TransportError",
    # Services
    "ArchiveInspector",
    "HTTPAPIClient",
    "PackageDroneTransport",
    "extract_coordinate",
]
