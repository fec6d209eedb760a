"""Deduplication of bundles that a feature already packages."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence, Tuple

from drone_deploy.models import Artifact

logger = logging.getLogger(__name__)

ContainmentCheck = Callable[[Artifact, Artifact], bool]


@dataclass(frozen=True)
class BundlePartition:
    """Bundles split by whether one feature contains them."""

    contained: Tuple[Artifact, ...]
    remaining: Tuple[Artifact, ...]


class PartitionContainedBundlesUseCase:
    """Split bundles into those a feature contains and the rest, keeping order."""

    def __init__(self, contains: ContainmentCheck):
        self._contains = contains

    def execute(self, feature: Artifact, bundles: Sequence[Artifact]) -> BundlePartition:
        contained = []
        remaining = []
        for bundle in bundles:
            if self._contains(feature, bundle):
                logger.debug("%s is packaged in feature %s", bundle.coordinate, feature.coordinate)
                contained.append(bundle)
            else:
                remaining.append(bundle)
        return BundlePartition(contained=tuple(contained), remaining=tuple(remaining))
