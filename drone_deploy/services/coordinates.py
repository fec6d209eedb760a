"""
Coordinate extraction - resolve a jar's Maven GAV from its embedded pom.xml.

Uses zipfile and xml.etree.ElementTree (stdlib). Expat never fetches
external entities, so untrusted descriptors cannot pull in remote content.
"""
import logging
import xml.etree.ElementTree as ET
import zipfile
import zlib
from pathlib import Path
from typing import Optional, Tuple

from ..errors import ArchiveError, DescriptorParseError, MalformedDescriptor
from ..models import Coordinate

logger = logging.getLogger(__name__)

DESCRIPTOR_NAME = "pom.xml"
SNAPSHOT_MARKER = "SNAPSHOT"

# Raised by zipfile for damaged archives and entries it cannot inflate.
ARCHIVE_READ_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, OSError)


def local_name(tag: str) -> str:
    """Strip the `{namespace}` prefix ElementTree puts on qualified tags."""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def find_child(parent: ET.Element, tag_name: str) -> Optional[ET.Element]:
    """Return the first direct child named `tag_name` (depth one only)."""
    for child in parent:
        if isinstance(child.tag, str) and local_name(child.tag) == tag_name:
            return child
    return None


def text_content(element: ET.Element) -> str:
    return "".join(element.itertext())


def find_descriptor_entry(jar: zipfile.ZipFile) -> Optional[zipfile.ZipInfo]:
    """First entry, in listing order, whose name ends with pom.xml."""
    for info in jar.infolist():
        if info.filename.endswith(DESCRIPTOR_NAME):
            return info
    return None


def read_descriptor_bytes(path: Path) -> Optional[Tuple[str, bytes]]:
    """Return (entry name, raw bytes) of the pom.xml embedded in a jar, if any."""
    try:
        with zipfile.ZipFile(path) as jar:
            entry = find_descriptor_entry(jar)
            if entry is None:
                return None
            logger.debug("Found descriptor %s in %s", entry.filename, path.name)
            with jar.open(entry) as stream:
                return entry.filename, stream.read()
    except ARCHIVE_READ_ERRORS as exc:
        raise ArchiveError(f"cannot read archive {path}: {exc}") from exc


def read_descriptor(path: Path) -> Optional[ET.Element]:
    """
    Find and parse the pom.xml embedded in a jar.

    Args:
        path: Jar file that may contain a pom.xml

    Returns:
        Root element of the parsed descriptor, or None if the jar has none
    """
    found = read_descriptor_bytes(path)
    if found is None:
        return None
    entry_name, data = found
    try:
        return ET.fromstring(data)
    except ET.ParseError as exc:
        raise DescriptorParseError(f"invalid {entry_name} in {path}: {exc}") from exc


def _find_project(root: ET.Element) -> Optional[ET.Element]:
    for element in root.iter():
        if isinstance(element.tag, str) and local_name(element.tag) == "project":
            return element
    return None


def snapshot_version_from_filename(filename: str) -> str:
    """
    Derive a snapshot build's version from `<artifactId>-<version>.<ext>`.

    Assumes a three character extension. Names that do not follow the
    convention are rejected instead of guessed at.
    """
    start = filename.find("-") + 1
    end = len(filename) - 4
    if end <= start:
        raise MalformedDescriptor(
            f"cannot derive snapshot version from file name {filename!r}: "
            "expected <artifactId>-<version>.<ext>"
        )
    return filename[start:end]


def extract_coordinate(path: Path) -> Optional[Coordinate]:
    """
    Resolve the coordinate of a jar.

    Returns None when the jar has no pom.xml. Raises MalformedDescriptor when
    a descriptor exists but groupId, artifactId or version cannot be resolved,
    also after falling back to the <parent> element.
    """
    path = Path(path)
    root = read_descriptor(path)
    if root is None:
        return None

    project = _find_project(root)
    if project is None:
        raise MalformedDescriptor(f"pom.xml in {path.name} has no <project> element")

    group_id = find_child(project, "groupId")
    artifact_id = find_child(project, "artifactId")
    version = find_child(project, "version")
    parent = find_child(project, "parent")

    if group_id is None and parent is not None:
        group_id = find_child(parent, "groupId")
    if version is None and parent is not None:
        version = find_child(parent, "version")

    if group_id is None or artifact_id is None or version is None:
        raise MalformedDescriptor(
            f"pom.xml in {path.name} didn't contain all necessary fields"
        )

    version_text = text_content(version)
    if SNAPSHOT_MARKER in version_text:
        version_text = snapshot_version_from_filename(path.name)

    return Coordinate(
        group=text_content(group_id),
        artifact=text_content(artifact_id),
        version=version_text,
    )
