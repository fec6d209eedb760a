"""Core orchestrator - classifies build output and uploads it in order."""
import logging
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

import httpx

from ..models import Artifact, ClassifiedArtifacts, DeployConfig, DeployResult
from ..protocols import ITransport
from ..services.api_client import HTTPAPIClient
from ..services.inspector import ArchiveInspector
from ..services.transport import PackageDroneTransport
from ..use_cases.classification import ClassifyArtifactsUseCase, CoordinateExtractor
from ..use_cases.deduplication import PartitionContainedBundlesUseCase
from ..utils.events import EventEmitter

logger = logging.getLogger(__name__)

PHASE_CLASSIFY = "classifying"
PHASE_FEATURES = "features"
PHASE_BUNDLES = "bundles"


class DeployOrchestrator:
    """
    Orchestrates a deploy run using injected services.

    Runs three phases, each to completion before the next:
    1. classify every file into features and bundles
    2. for each feature, drop the bundles it packages, then upload it
    3. upload the bundles no feature packages

    The first error ends the run. Uploads already done are kept.

    Usage:
        async with DeployOrchestrator(config) as orchestrator:
            orchestrator.on("artifact_uploaded", print)
            result = await orchestrator.run(files)
    """

    def __init__(
        self,
        config: DeployConfig,
        transport: Optional[ITransport] = None,
        inspector: Optional[ArchiveInspector] = None,
        extractor: Optional[CoordinateExtractor] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize orchestrator with dependencies.

        Args:
            config: Deploy configuration
            transport: Pre-built transport; one talking to config.base_url is created otherwise
            inspector: Artifact type classifier
            extractor: Coordinate extractor, defaults to the pom.xml reader
            http_transport: httpx transport for the created API client (tests)
        """
        self._config = config
        self._external_transport = transport
        self._inspector = inspector or ArchiveInspector()
        self._extractor = extractor
        self._http_transport = http_transport
        self._events = EventEmitter()

        # Initialized in __aenter__
        self._api_client: Optional[HTTPAPIClient] = None
        self._transport: Optional[ITransport] = None

    async def __aenter__(self):
        if self._external_transport is not None:
            self._transport = self._external_transport
            return self

        self._api_client = HTTPAPIClient(
            self._config.base_url,
            self._config.key,
            timeout=self._config.timeout,
            transport=self._http_transport,
        )
        await self._api_client.__aenter__()
        self._transport = PackageDroneTransport(self._api_client, self._config, self._inspector)
        return self

    async def __aexit__(self, *args):
        if self._api_client:
            await self._api_client.__aexit__(*args)
            self._api_client = None
        self._transport = None

    def on(self, event_name: str, callback: Callable) -> "DeployOrchestrator":
        """Subscribe to a progress event."""
        self._events.on(event_name, callback)
        return self

    async def run(self, files: Iterable[Path]) -> DeployResult:
        """Classify and upload the given files, returning the aggregate outcome."""
        if self._transport is None:
            raise RuntimeError("DeployOrchestrator not initialized. Use 'async with' context.")

        try:
            classified = await self._classify(list(files))
        except Exception as exc:
            return await self._fail(PHASE_CLASSIFY, "Error while collecting artifacts", exc)

        try:
            bundles = await self._upload_features(classified.features, classified.bundles)
        except Exception as exc:
            return await self._fail(PHASE_FEATURES, "Error while uploading artifacts", exc)

        try:
            await self._upload_bundles(bundles)
        except Exception as exc:
            return await self._fail(PHASE_BUNDLES, "Error while uploading artifact", exc)

        return DeployResult.ok()

    async def _classify(self, files: Sequence[Path]) -> ClassifiedArtifacts:
        await self._events.emit("phase_start", PHASE_CLASSIFY, f"Checking {len(files)} files")
        classifier = ClassifyArtifactsUseCase(
            skip_unparseable_files=self._config.skip_unparseable_files,
            extractor=self._extractor,
            inspector=self._inspector,
        )
        classified = classifier.execute(files)
        for skipped in classified.skipped:
            await self._events.emit("artifact_skipped", skipped)
        await self._events.emit(
            "phase_complete",
            PHASE_CLASSIFY,
            f"{len(classified.features)} features, {len(classified.bundles)} bundles",
        )
        return classified

    async def _upload_features(
        self,
        features: Sequence[Artifact],
        bundles: Sequence[Artifact],
    ) -> Sequence[Artifact]:
        """Upload features in order and return the bundles none of them packages."""
        assert self._transport is not None
        logger.info("Uploading Features")
        await self._events.emit("phase_start", PHASE_FEATURES, f"Uploading {len(features)} features")
        partition = PartitionContainedBundlesUseCase(self._transport.feature_has_artifact)

        remaining = tuple(bundles)
        for feature in features:
            logger.info(
                "Uploading Feature: %s via file: %s", feature.coordinate, feature.filename
            )
            split = partition.execute(feature, remaining)
            for bundle in split.contained:
                await self._events.emit("artifact_dropped", bundle, feature)
            remaining = split.remaining

            await self._events.emit("artifact_start", feature)
            await self._transport.upload_feature(feature, remaining)
            await self._events.emit("artifact_uploaded", feature)

        await self._events.emit("phase_complete", PHASE_FEATURES, f"{len(features)} uploaded")
        return remaining

    async def _upload_bundles(self, bundles: Sequence[Artifact]) -> None:
        assert self._transport is not None
        logger.info("Uploading Bundles without features")
        await self._events.emit("phase_start", PHASE_BUNDLES, f"Uploading {len(bundles)} bundles")
        for bundle in bundles:
            logger.info("Uploading Bundle: %s via file: %s", bundle.coordinate, bundle.filename)
            await self._events.emit("artifact_start", bundle)
            await self._transport.upload_artifact(bundle)
            await self._events.emit("artifact_uploaded", bundle)
        await self._events.emit("phase_complete", PHASE_BUNDLES, f"{len(bundles)} uploaded")

    async def _fail(self, phase: str, message: str, exc: Exception) -> DeployResult:
        reason = str(exc).strip() or type(exc).__name__
        logger.error("%s (%s): %s", message, phase, reason)
        logger.debug("Traceback for failed %s phase", phase, exc_info=exc)
        await self._events.emit("error", phase, exc)
        return DeployResult.fail(reason, phase=phase)
