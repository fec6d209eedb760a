"""Classification use case - turn build output files into features and bundles."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from drone_deploy.errors import MissingCoordinate
from drone_deploy.models import Artifact, ArtifactKind, ClassifiedArtifacts, Coordinate
from drone_deploy.protocols import IArtifactInspector
from drone_deploy.services.coordinates import extract_coordinate
from drone_deploy.services.inspector import ArchiveInspector

logger = logging.getLogger(__name__)

CoordinateExtractor = Callable[[Path], Optional[Coordinate]]


class ClassifyArtifactsUseCase:
    """
    Resolve a coordinate for every file and split them by kind.

    Files without a pom.xml are skipped when `skip_unparseable_files` is set,
    otherwise MissingCoordinate is raised. Every other extraction error
    propagates unchanged. Input order is kept within each kind.
    """

    def __init__(
        self,
        skip_unparseable_files: bool = False,
        extractor: Optional[CoordinateExtractor] = None,
        inspector: Optional[IArtifactInspector] = None,
    ):
        self._skip_unparseable_files = skip_unparseable_files
        self._extract = extractor or extract_coordinate
        self._inspector = inspector or ArchiveInspector()

    def execute(self, files: Iterable[Path]) -> ClassifiedArtifacts:
        features: List[Artifact] = []
        bundles: List[Artifact] = []
        skipped: List[Path] = []

        for file_path in files:
            file_path = Path(file_path)
            logger.info("Checking file: %s", file_path.absolute())

            coordinate = self._extract(file_path)
            if coordinate is None:
                if self._skip_unparseable_files:
                    logger.info("File has no GAV, skipping: %s", file_path.absolute())
                    skipped.append(file_path)
                    continue
                logger.error("File has no GAV, aborting: %s", file_path.absolute())
                raise MissingCoordinate(f"missing coordinate: {file_path.absolute()}")

            kind = self._inspector.detect_kind(file_path)
            logger.info("ArtifactType: %s (%s)", kind.name, coordinate)
            artifact = Artifact(coordinate=coordinate, source_file=file_path, kind=kind)
            if kind == ArtifactKind.FEATURE:
                features.append(artifact)
            else:
                bundles.append(artifact)

        return ClassifiedArtifacts(
            features=tuple(features),
            bundles=tuple(bundles),
            skipped=tuple(skipped),
        )
