"""
Data models for dockdash.

This module defines the plain dataclasses that flow between the daemon
boundary, the views and the controller:
  - ResourceKind: the four daemon-managed resource kinds (one list tab each)
  - ContainerRow / ImageRow / VolumeRow / NetworkRow: display-ready rows
  - ContainerDetail: the full attribute set shown on the detail screen
  - ListScreen / DetailScreen: the controller's active screen

Rows are produced by formatting.py from raw daemon records and are replaced
wholesale on every refresh, never patched in place.

Multi-line fields (ports, tags, mounts, env) are kept as lists of lines; their
length drives the rendered height of a row.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Union


class ResourceKind(str, Enum):
    CONTAINERS = "containers"
    IMAGES = "images"
    VOLUMES = "volumes"
    NETWORKS = "networks"

    @property
    def label(self) -> str:
        return self.value.upper()


@dataclass(frozen=True)
class ContainerRow:
    id: str
    name: str
    image: str
    state: str
    ports: List[str] = field(default_factory=list)

    @property
    def short_id(self) -> str:
        return self.id[:12]

    @property
    def is_running(self) -> bool:
        return self.state == "running"


@dataclass(frozen=True)
class ImageRow:
    id: str
    tags: List[str]
    size: str
    created: str


@dataclass(frozen=True)
class VolumeRow:
    name: str
    driver: str
    mountpoint: str

    @property
    def id(self) -> str:
        # Volumes are addressed by name on the daemon API
        return self.name


@dataclass(frozen=True)
class NetworkRow:
    id: str
    name: str
    driver: str
    created: str

    @property
    def short_id(self) -> str:
        return f"{self.id[:12]}..."


Row = Union[ContainerRow, ImageRow, VolumeRow, NetworkRow]


@dataclass(frozen=True)
class ContainerDetail:
    id: str
    name: str
    image: str = "-"
    created: str = "-"
    state: str = "-"
    ip_address: str = ""
    start_time: str = "-"
    restart_policy: str = "-"
    cmd: List[str] = field(default_factory=list)
    entrypoint: List[str] = field(default_factory=list)
    env: List[str] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)
    ports: List[str] = field(default_factory=list)
    mounts: List[str] = field(default_factory=list)

    @property
    def is_running(self) -> bool:
        return self.state == "running"


@dataclass(frozen=True)
class ListScreen:
    kind: ResourceKind


@dataclass(frozen=True)
class DetailScreen:
    container_id: str


Screen = Union[ListScreen, DetailScreen]
