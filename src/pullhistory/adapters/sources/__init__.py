"""Sample source adapters implementing SampleSourcePort."""

from pullhistory.adapters.sources.dockerhub import DockerHubSource
from pullhistory.adapters.sources.static import StaticSource

__all__ = [
    "DockerHubSource",
    "StaticSource",
]
