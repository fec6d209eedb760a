"""Application use cases for deploy workflows."""

from .classification import ClassifyArtifactsUseCase
from .deduplication import BundlePartition, PartitionContainedBundlesUseCase

__all__ = [
    "ClassifyArtifactsUseCase",
    "BundlePartition",
    "PartitionContainedBundlesUseCase",
]
