"""
Archive inspector - Single Responsibility: look inside jars.

Decides whether a jar is a feature or a bundle and whether a feature
packages a given bundle, using META-INF/MANIFEST.MF and feature.xml.
"""
import logging
import xml.etree.ElementTree as ET
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

from ..errors import ArchiveError, DescriptorParseError
from ..models import Artifact, ArtifactKind
from .coordinates import ARCHIVE_READ_ERRORS, local_name

logger = logging.getLogger(__name__)

FEATURE_DESCRIPTOR = "feature.xml"
MANIFEST_PATH = "META-INF/MANIFEST.MF"
ANY_VERSION = "0.0.0"


@dataclass(frozen=True)
class PluginRef:
    """A <plugin> entry of a feature.xml."""
    id: str
    version: str = ANY_VERSION


def parse_manifest(content: str) -> Dict[str, str]:
    """
    Parse the main section of a jar manifest.

    Continuation lines start with a single space and are joined to the
    previous header.
    """
    headers: Dict[str, str] = {}
    last_key: Optional[str] = None
    for raw_line in content.splitlines():
        if raw_line == "":
            break
        if raw_line.startswith(" ") and last_key is not None:
            headers[last_key] += raw_line[1:]
            continue
        if ":" not in raw_line:
            continue
        key, value = raw_line.split(":", 1)
        last_key = key.strip()
        headers[last_key] = value.strip()
    return headers


class ArchiveInspector:
    """Reads classification data out of jar files."""

    def _read_entry(self, path: Path, name: str) -> Optional[bytes]:
        try:
            with zipfile.ZipFile(path) as jar:
                try:
                    info = jar.getinfo(name)
                except KeyError:
                    return None
                with jar.open(info) as stream:
                    return stream.read()
        except ARCHIVE_READ_ERRORS as exc:
            raise ArchiveError(f"cannot read archive {path}: {exc}") from exc

    def detect_kind(self, path: Path) -> ArtifactKind:
        """FEATURE if the jar holds a top-level feature.xml, else BUNDLE."""
        try:
            with zipfile.ZipFile(path) as jar:
                names = set(jar.namelist())
        except ARCHIVE_READ_ERRORS as exc:
            raise ArchiveError(f"cannot read archive {path}: {exc}") from exc
        if FEATURE_DESCRIPTOR in names:
            return ArtifactKind.FEATURE
        return ArtifactKind.BUNDLE

    def read_manifest(self, path: Path) -> Dict[str, str]:
        data = self._read_entry(path, MANIFEST_PATH)
        if data is None:
            return {}
        return parse_manifest(data.decode("utf-8", errors="replace"))

    def bundle_identity(self, artifact: Artifact) -> Tuple[str, str]:
        """
        Return (symbolic name, version) of a bundle.

        Falls back to the Maven artifactId and version for plain jars
        without OSGi headers.
        """
        manifest = self.read_manifest(artifact.source_file)
        symbolic_name = manifest.get("Bundle-SymbolicName", "").split(";", 1)[0].strip()
        version = manifest.get("Bundle-Version", "").strip()
        return (
            symbolic_name or artifact.coordinate.artifact,
            version or artifact.coordinate.version,
        )

    def feature_plugins(self, path: Path) -> Tuple[PluginRef, ...]:
        data = self._read_entry(path, FEATURE_DESCRIPTOR)
        if data is None:
            return ()
        try:
            root = ET.fromstring(data)
        except ET.ParseError as exc:
            raise DescriptorParseError(f"invalid feature.xml in {path}: {exc}") from exc

        plugins = []
        for child in root:
            if not isinstance(child.tag, str) or local_name(child.tag) != "plugin":
                continue
            plugin_id = child.get("id")
            if plugin_id:
                plugins.append(PluginRef(plugin_id, child.get("version") or ANY_VERSION))
        return tuple(plugins)

    def contains(self, feature: Artifact, bundle: Artifact) -> bool:
        """Whether the feature's feature.xml lists this bundle."""
        symbolic_name, version = self.bundle_identity(bundle)
        for plugin in self.feature_plugins(feature.source_file):
            if plugin.id != symbolic_name:
                continue
            if plugin.version in (ANY_VERSION, version):
                return True
        return False
