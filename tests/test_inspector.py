"""Tests for jar classification and feature containment."""
import zipfile

import pytest

from conftest import corrupt_entry, feature_xml, manifest, pom_xml
from drone_deploy.errors import ArchiveError, DescriptorParseError
from drone_deploy.models import Artifact, ArtifactKind, Coordinate
from drone_deploy.services.inspector import ArchiveInspector, PluginRef, parse_manifest


@pytest.fixture
def inspector():
    return ArchiveInspector()


def _bundle(path, artifact="b", version="1.0"):
    return Artifact(Coordinate("g", artifact, version), path, ArtifactKind.BUNDLE)


def _feature(path):
    return Artifact(Coordinate("g", "feat", "1.0"), path, ArtifactKind.FEATURE)


class TestParseManifest:
    def test_joins_continuation_lines(self):
        headers = parse_manifest(
            "Manifest-Version: 1.0\n"
            "Bundle-SymbolicName: org.example.very.long.bundle.na\n"
            " me;singleton:=true\n"
            "Bundle-Version: 1.2.3\n"
        )
        assert headers["Bundle-SymbolicName"] == "org.example.very.long.bundle.name;singleton:=true"
        assert headers["Bundle-Version"] == "1.2.3"

    def test_stops_at_first_blank_line(self):
        headers = parse_manifest("Manifest-Version: 1.0\n\nName: foo\nBundle-Version: 9\n")
        assert "Bundle-Version" not in headers

    def test_whitespace_only_continuation_is_not_a_section_break(self):
        headers = parse_manifest(
            "Manifest-Version: 1.0\r\n"
            "Implementation-Title: Example\r\n"
            "  \r\n"
            "Bundle-Version: 1.2.3\r\n"
        )
        assert headers["Implementation-Title"] == "Example "
        assert headers["Bundle-Version"] == "1.2.3"


class TestDetectKind:
    def test_feature_xml_makes_feature(self, make_jar, inspector):
        jar = make_jar("feat-1.0.jar", entries={"feature.xml": feature_xml("feat", [])})
        assert inspector.detect_kind(jar) == ArtifactKind.FEATURE

    def test_everything_else_is_bundle(self, make_jar, inspector):
        jar = make_jar("b-1.0.jar", pom=pom_xml(), entries={"META-INF/MANIFEST.MF": manifest("b", "1.0")})
        assert inspector.detect_kind(jar) == ArtifactKind.BUNDLE

    def test_nested_feature_xml_is_not_a_feature(self, make_jar, inspector):
        jar = make_jar("b-1.0.jar", entries={"templates/feature.xml": "<feature/>"})
        assert inspector.detect_kind(jar) == ArtifactKind.BUNDLE

    def test_invalid_archive(self, tmp_path, inspector):
        path = tmp_path / "x-1.0.jar"
        path.write_text("nope")
        with pytest.raises(ArchiveError):
            inspector.detect_kind(path)


class TestContainment:
    def test_bundle_identity_from_manifest(self, make_jar, inspector):
        jar = make_jar("b-1.0.jar", entries={"META-INF/MANIFEST.MF": manifest("org.example.b", "1.0.0.v1")})
        assert inspector.bundle_identity(_bundle(jar)) == ("org.example.b", "1.0.0.v1")

    def test_bundle_identity_falls_back_to_coordinate(self, make_jar, inspector):
        jar = make_jar("b-1.0.jar", pom=pom_xml("g", "b", "1.0"))
        assert inspector.bundle_identity(_bundle(jar)) == ("b", "1.0")

    def test_corrupt_manifest_raises_archive_error(self, make_jar, inspector):
        jar = make_jar(
            "b-1.0.jar",
            entries={"META-INF/MANIFEST.MF": manifest("org.example.b", "1.0")},
            compression=zipfile.ZIP_DEFLATED,
        )
        corrupt_entry(jar, "META-INF/MANIFEST.MF")

        with pytest.raises(ArchiveError, match="b-1.0.jar"):
            inspector.bundle_identity(_bundle(jar))

    def test_feature_plugins(self, make_jar, inspector):
        jar = make_jar(
            "feat-1.0.jar",
            entries={"feature.xml": feature_xml("feat", [("b", "1.0"), ("c", "0.0.0")])},
        )
        assert inspector.feature_plugins(jar) == (PluginRef("b", "1.0"), PluginRef("c", "0.0.0"))

    def test_feature_plugins_invalid_xml(self, make_jar, inspector):
        jar = make_jar("feat-1.0.jar", entries={"feature.xml": "<feature><plugin></feature>"})
        with pytest.raises(DescriptorParseError):
            inspector.feature_plugins(jar)

    def test_contains_matching_id_and_version(self, make_jar, inspector):
        feature = make_jar("feat-1.0.jar", entries={"feature.xml": feature_xml("feat", [("b", "1.0")])})
        bundle = make_jar("b-1.0.jar", pom=pom_xml("g", "b", "1.0"))
        assert inspector.contains(_feature(feature), _bundle(bundle)) is True

    def test_version_mismatch_is_not_contained(self, make_jar, inspector):
        feature = make_jar("feat-1.0.jar", entries={"feature.xml": feature_xml("feat", [("b", "2.0")])})
        bundle = make_jar("b-1.0.jar", pom=pom_xml("g", "b", "1.0"))
        assert inspector.contains(_feature(feature), _bundle(bundle)) is False

    def test_wildcard_version_matches_any(self, make_jar, inspector):
        feature = make_jar("feat-1.0.jar", entries={"feature.xml": feature_xml("feat", [("org.example.b", "0.0.0")])})
        bundle = make_jar("b-1.0.jar", entries={"META-INF/MANIFEST.MF": manifest("org.example.b", "4.2.0")})
        assert inspector.contains(_feature(feature), _bundle(bundle)) is True

    def test_unrelated_bundle(self, make_jar, inspector):
        feature = make_jar("feat-1.0.jar", entries={"feature.xml": feature_xml("feat", [("b", "1.0")])})
        bundle = make_jar("c-1.0.jar", pom=pom_xml("g", "c", "1.0"))
        assert inspector.contains(_feature(feature), _bundle(bundle, artifact="c")) is False
