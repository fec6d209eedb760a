"""Shared fixtures: build real jar files in tmp_path."""
import struct
import zipfile
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

import pytest

POM_NS = "http://maven.apache.org/POM/4.0.0"


def pom_xml(
    group: Optional[str] = "g",
    artifact: Optional[str] = "a",
    version: Optional[str] = "1.0",
    parent: Optional[Tuple[Optional[str], Optional[str]]] = None,
    namespace: bool = True,
    extra: str = "",
) -> str:
    parts = []
    if parent is not None:
        parent_group, parent_version = parent
        parent_parts = ["<artifactId>parent</artifactId>"]
        if parent_group is not None:
            parent_parts.insert(0, f"<groupId>{parent_group}</groupId>")
        if parent_version is not None:
            parent_parts.append(f"<version>{parent_version}</version>")
        parts.append(f"<parent>{''.join(parent_parts)}</parent>")
    if group is not None:
        parts.append(f"<groupId>{group}</groupId>")
    if artifact is not None:
        parts.append(f"<artifactId>{artifact}</artifactId>")
    if version is not None:
        parts.append(f"<version>{version}</version>")
    parts.append(extra)
    ns = f' xmlns="{POM_NS}"' if namespace else ""
    return f'<?xml version="1.0" encoding="UTF-8"?>\n<project{ns}>{"".join(parts)}</project>'


def feature_xml(feature_id: str, plugins: Sequence[Tuple[str, str]]) -> str:
    entries = "".join(f'<plugin id="{pid}" version="{pver}" unpack="false"/>' for pid, pver in plugins)
    return f'<?xml version="1.0"?>\n<feature id="{feature_id}" version="1.0.0">{entries}</feature>'


def manifest(symbolic_name: str, version: str) -> str:
    return (
        "Manifest-Version: 1.0\r\n"
        f"Bundle-SymbolicName: {symbolic_name};singleton:=true\r\n"
        f"Bundle-Version: {version}\r\n"
        "\r\n"
    )


def corrupt_entry(path: Path, entry_name: str) -> None:
    """Overwrite the stored data of one entry with 0xFF bytes, keeping the listing intact."""
    with zipfile.ZipFile(path) as jar:
        info = jar.getinfo(entry_name)
    data = bytearray(path.read_bytes())
    header = info.header_offset
    name_len, extra_len = struct.unpack("<HH", data[header + 26:header + 30])
    start = header + 30 + name_len + extra_len
    data[start:start + info.compress_size] = b"\xff" * info.compress_size
    path.write_bytes(bytes(data))


@pytest.fixture
def make_jar(tmp_path):
    """Create a jar with the given entries; `pom` lands under META-INF/maven."""

    def _make(
        name: str,
        pom: Optional[str] = None,
        entries: Optional[Dict[str, str]] = None,
        folder: Optional[Path] = None,
        compression: int = zipfile.ZIP_STORED,
    ) -> Path:
        path = (folder or tmp_path) / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w", compression=compression) as jar:
            for entry_name, content in (entries or {}).items():
                jar.writestr(entry_name, content)
            if pom is not None:
                jar.writestr("META-INF/maven/g/a/pom.xml", pom)
        return path

    return _make
