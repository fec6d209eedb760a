"""Tests for drone_deploy models."""
from pathlib import Path

import pytest
from drone_deploy.models import (
    Artifact,
    ArtifactKind,
    Coordinate,
    DeployConfig,
    DeployResult,
    DeployStatus,
)


class TestCoordinate:
    def test_equality_is_exact(self):
        assert Coordinate("g", "a", "1.0") == Coordinate("g", "a", "1.0")
        assert Coordinate("g", "a", "1.0") != Coordinate("G", "a", "1.0")
        assert Coordinate("g", "a", "1.0") != Coordinate("g", "a", "1.0.0")

    def test_str(self):
        assert str(Coordinate("org.example", "bundle", "2.0")) == "org.example:bundle:2.0"

    def test_immutable(self):
        coordinate = Coordinate("g", "a", "1")
        with pytest.raises(Exception):
            coordinate.version = "2"


class TestArtifact:
    def test_defaults_to_bundle(self):
        artifact = Artifact(Coordinate("g", "a", "1"), Path("dist/a-1.jar"))
        assert artifact.kind == ArtifactKind.BUNDLE
        assert artifact.is_feature is False
        assert artifact.filename == "a-1.jar"

    def test_feature(self):
        artifact = Artifact(Coordinate("g", "f", "1"), Path("f-1.jar"), ArtifactKind.FEATURE)
        assert artifact.is_feature is True


class TestDeployResult:
    def test_ok_result(self):
        result = DeployResult.ok()
        assert result.success is True
        assert result.status == DeployStatus.SUCCESS
        assert result.error is None

    def test_fail_result(self):
        result = DeployResult.fail("upload failed", phase="bundles")
        assert result.success is False
        assert result.status == DeployStatus.FAILED
        assert result.error == "upload failed"
        assert result.phase == "bundles"


class TestDeployConfig:
    def test_defaults(self):
        config = DeployConfig(host="drone", channel="c")
        assert config.port == 8080
        assert config.upload_poms is False
        assert config.skip_unparseable_files is False
        assert config.timeout == 60.0
