"""Services for drone_deploy."""
from .api_client import HTTPAPIClient
from .coordinates import extract_coordinate
from .inspector import ArchiveInspector, PluginRef
from .transport import PackageDroneTransport

__all__ = [
    "HTTPAPIClient",
    "extract_coordinate",
    "ArchiveInspector",
    "PluginRef",
    "PackageDroneTransport",
]
