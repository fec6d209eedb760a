"""
Package Drone transport - uploads jars to a channel over the plain upload API.

Upload flow:
1. PUT the jar to /api/v3/upload/plain/channel/{channel}/{filename}, with
   the Maven coordinate as provided metadata in the query string
2. The repository answers with the id of the created artifact
3. Optionally PUT the embedded pom.xml as a child of that artifact
"""
import logging
from typing import AsyncIterable, AsyncIterator, BinaryIO, Dict, Optional, Sequence, Union
from urllib.parse import quote

from ..errors import ArchiveError, TransportError
from ..models import Artifact, DeployConfig
from ..protocols import IAPIClient
from .coordinates import read_descriptor_bytes
from .inspector import ArchiveInspector

logger = logging.getLogger(__name__)

CHANNEL_UPLOAD_PATH = "/api/v3/upload/plain/channel/{channel}/{filename}"
CHILD_UPLOAD_PATH = "/api/v3/upload/plain/artifact/{channel}/{parent_id}/{filename}"
UPLOAD_CHUNK_SIZE = 64 * 1024


def maven_metadata(artifact: Artifact) -> Dict[str, str]:
    """Provided metadata attached to an upload."""
    coordinate = artifact.coordinate
    return {
        "mvn:groupId": coordinate.group,
        "mvn:artifactId": coordinate.artifact,
        "mvn:version": coordinate.version,
        "mvn:extension": artifact.source_file.suffix.lstrip(".") or "jar",
    }


async def iter_file(stream: BinaryIO, chunk_size: int = UPLOAD_CHUNK_SIZE) -> AsyncIterator[bytes]:
    """Yield an open file in chunks so large jars are not held in memory."""
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        yield chunk


class PackageDroneTransport:
    """
    Uploads artifacts to one channel.

    Implements ITransport protocol.
    """

    def __init__(
        self,
        api_client: IAPIClient,
        config: DeployConfig,
        inspector: Optional[ArchiveInspector] = None,
    ):
        self._api = api_client
        self._config = config
        self._inspector = inspector or ArchiveInspector()

    def feature_has_artifact(self, feature: Artifact, bundle: Artifact) -> bool:
        return self._inspector.contains(feature, bundle)

    async def upload_feature(
        self,
        feature: Artifact,
        candidate_bundles: Sequence[Artifact],
    ) -> str:
        """
        Upload a feature jar.

        Bundles the feature lists by symbolic name but in a different version
        than the build produced are reported, they get uploaded standalone.
        """
        referenced = {
            plugin.id: plugin.version
            for plugin in self._inspector.feature_plugins(feature.source_file)
        }
        for bundle in candidate_bundles:
            name, version = self._inspector.bundle_identity(bundle)
            if name in referenced:
                logger.warning(
                    "Feature %s references %s in version %s, build produced %s; "
                    "uploading it standalone",
                    feature.coordinate,
                    name,
                    referenced[name],
                    version,
                )
        return await self.upload_artifact(feature)

    async def upload_artifact(self, artifact: Artifact) -> str:
        try:
            size = artifact.source_file.stat().st_size
            stream = artifact.source_file.open("rb")
        except OSError as exc:
            raise TransportError(
                f"cannot read {artifact.source_file}: {exc}",
                artifact=str(artifact.coordinate),
            ) from exc

        endpoint = CHANNEL_UPLOAD_PATH.format(
            channel=quote(self._config.channel, safe=""),
            filename=quote(artifact.filename, safe=""),
        )
        with stream:
            artifact_id = await self._put(
                artifact,
                endpoint,
                iter_file(stream),
                maven_metadata(artifact),
                headers={"Content-Length": str(size)},
            )
        logger.info("Uploaded %s as %s", artifact.coordinate, artifact_id)

        if self._config.upload_poms:
            await self._upload_pom(artifact, artifact_id)
        return artifact_id

    async def _upload_pom(self, artifact: Artifact, parent_id: str) -> Optional[str]:
        if not parent_id:
            raise TransportError(
                f"repository returned no artifact id for {artifact.coordinate}, "
                "cannot attach pom.xml",
                artifact=str(artifact.coordinate),
            )
        try:
            found = read_descriptor_bytes(artifact.source_file)
        except ArchiveError as exc:
            raise TransportError(
                f"cannot read pom.xml of {artifact.coordinate}: {exc}",
                artifact=str(artifact.coordinate),
            ) from exc
        if found is None:
            logger.debug("No pom.xml to attach for %s", artifact.coordinate)
            return None

        coordinate = artifact.coordinate
        filename = f"{coordinate.artifact}-{coordinate.version}.pom"
        endpoint = CHILD_UPLOAD_PATH.format(
            channel=quote(self._config.channel, safe=""),
            parent_id=quote(parent_id, safe=""),
            filename=quote(filename, safe=""),
        )
        params = maven_metadata(artifact)
        params["mvn:extension"] = "pom"
        child_id = await self._put(artifact, endpoint, found[1], params)
        logger.info("Attached %s to %s", filename, parent_id)
        return child_id

    async def _put(
        self,
        artifact: Artifact,
        endpoint: str,
        content: Union[bytes, AsyncIterable[bytes]],
        params: Dict[str, str],
        headers: Optional[Dict[str, str]] = None,
    ) -> str:
        try:
            response = await self._api.put(endpoint, content, params=params, headers=headers)
        except TransportError as exc:
            raise TransportError(
                f"upload of {artifact.coordinate} failed: {exc}",
                status_code=exc.status_code,
                artifact=str(artifact.coordinate),
            ) from exc
        return response.text.strip()
