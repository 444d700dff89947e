"""Registry adapters: publish command, read API and manifests."""

from .http import HttpClient, HttpError, MockHttpClient, RealHttpClient
from .index import RegistryIndex
from .publisher import CargoPublisher, Credential, PackageRef, PublishError, RegistryPublisher

__all__ = [
    "CargoPublisher",
    "Credential",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "PackageRef",
    "PublishError",
    "RealHttpClient",
    "RegistryIndex",
    "RegistryPublisher",
]
