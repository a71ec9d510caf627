"""
Projection of raw daemon records into display rows.

Every function here is pure: it takes the dicts the docker SDK exposes as
`.attrs` (or the low-level API's summaries) and returns the dataclasses from
model.py. Missing keys never raise; they fall back to "-" or an empty list.

Key Functions:
  - container_rows / image_rows / volume_rows / network_rows: list + sort
  - build_rows(kind, records): dispatch on resource kind
  - row_height(row): rendered height of a row in a list view
  - container_detail(attrs): inspect record -> ContainerDetail
  - summarize_*_error(message): one-line banner text for removal failures
  - time_ago(created): "3 days ago" / "in 2 hours"
"""

import re
import time
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from .model import (
    ContainerDetail,
    ContainerRow,
    ImageRow,
    NetworkRow,
    ResourceKind,
    Row,
    VolumeRow,
)

MIN_ROW_HEIGHT = 3
FALLBACK_ERROR = "Something went wrong..."
ERROR_PREFIX = "[ERR] "

IMAGE_IN_USE_RE = re.compile(
    r"\((?:cannot|must) be forced\) - image is being used by (?:running|stopped) container \w+"
)
NETWORK_ERROR_RE = re.compile(r":(?:[^:]+:)?\s*([^\(]+)")
VOLUME_IN_USE_RE = re.compile(r"\[([a-z0-9]+)\]")
FRACTIONAL_SECONDS_RE = re.compile(r"\.\d+")

# (seconds per unit, unit name), largest first
TIME_UNITS = [
    (31_536_000, "year"),
    (2_592_000, "month"),
    (86_400, "day"),
    (3_600, "hour"),
    (60, "minute"),
    (1, "second"),
]

Record = Dict[str, Any]


def _text(value: Any, default: str = "-") -> str:
    if value is None or value == "":
        return default
    return str(value)


def time_ago(created: Union[int, float, str, None], now: Optional[float] = None) -> str:
    """Human relative time for an epoch timestamp or an ISO-8601 string."""
    epoch = _to_epoch(created)
    if epoch is None:
        return "-"
    if now is None:
        now = time.time()

    diff = int(now) - int(epoch)
    abs_diff = abs(diff)
    for seconds, unit in TIME_UNITS:
        if abs_diff >= seconds or seconds == 1:
            value = abs_diff // seconds
            break

    plural = "" if value == 1 else "s"
    if diff >= 0:
        return f"{value} {unit}{plural} ago"
    return f"in {value} {unit}{plural}"


def _to_epoch(created: Union[int, float, str, None]) -> Optional[float]:
    if created is None or created == "":
        return None
    if isinstance(created, (int, float)):
        return float(created)
    # Daemon timestamps carry nanoseconds, which fromisoformat rejects
    text = FRACTIONAL_SECONDS_RE.sub("", created).replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(text).timestamp()
    except ValueError:
        return None


def format_size(size_bytes: Any) -> str:
    try:
        return f"{int(size_bytes) / (1024 * 1024):.1f}MB"
    except (TypeError, ValueError):
        return "-"


# --- CONTAINERS ---

def _container_name(names: Optional[List[str]]) -> str:
    if not names:
        return "NaN"
    return names[0].lstrip("/") or "NaN"


def published_ports(ports: Optional[Iterable[Record]]) -> List[str]:
    """`private:public/proto` for every port with a public mapping, deduplicated."""
    mapped = set()
    for port in ports or []:
        public = port.get("PublicPort")
        proto = port.get("Type")
        if public is None or not proto:
            continue
        mapped.add((port.get("PrivatePort", 0), public, proto))
    return [f"{private}:{public}/{proto}" for private, public, proto in sorted(mapped)]


def container_row(attrs: Record) -> ContainerRow:
    return ContainerRow(
        id=_text(attrs.get("Id")),
        name=_container_name(attrs.get("Names")),
        image=_text(attrs.get("Image")),
        state=_text(attrs.get("State")),
        ports=published_ports(attrs.get("Ports")),
    )


def container_rows(records: Iterable[Record]) -> List[ContainerRow]:
    # Running containers first, then grouped by state
    rows = [container_row(r) for r in records]
    return sorted(rows, key=lambda c: (not c.state.startswith("r"), c.state))


# --- IMAGES ---

def image_row(attrs: Record, now: Optional[float] = None) -> ImageRow:
    image_id = _text(attrs.get("Id"))
    if ":" in image_id:
        image_id = image_id.split(":", 1)[1]
    return ImageRow(
        id=image_id,
        tags=list(attrs.get("RepoTags") or []),
        size=format_size(attrs.get("Size")),
        created=time_ago(attrs.get("Created"), now=now),
    )


def image_rows(records: Iterable[Record], now: Optional[float] = None) -> List[ImageRow]:
    ordered = sorted(records, key=lambda r: _to_epoch(r.get("Created")) or 0, reverse=True)
    return [image_row(r, now=now) for r in ordered]


# --- VOLUMES ---

def volume_row(attrs: Record) -> VolumeRow:
    return VolumeRow(
        name=_text(attrs.get("Name")),
        driver=_text(attrs.get("Driver")),
        mountpoint=_text(attrs.get("Mountpoint")),
    )


def volume_rows(records: Iterable[Record]) -> List[VolumeRow]:
    return [volume_row(r) for r in records]


# --- NETWORKS ---

def network_row(attrs: Record) -> NetworkRow:
    return NetworkRow(
        id=_text(attrs.get("Id")),
        name=_text(attrs.get("Name")),
        driver=_text(attrs.get("Driver")),
        created=FRACTIONAL_SECONDS_RE.sub("", attrs.get("Created") or ""),
    )


def network_rows(records: Iterable[Record]) -> List[NetworkRow]:
    return sorted((network_row(r) for r in records), key=lambda n: n.name)


def build_rows(kind: ResourceKind, records: Iterable[Record]) -> List[Row]:
    if kind == ResourceKind.CONTAINERS:
        return container_rows(records)
    if kind == ResourceKind.IMAGES:
        return image_rows(records)
    if kind == ResourceKind.VOLUMES:
        return volume_rows(records)
    return network_rows(records)


def row_height(row: Row) -> int:
    """Rendered height: the multi-line field plus one blank line above and below."""
    if isinstance(row, ContainerRow):
        return max(MIN_ROW_HEIGHT, len(row.ports) + 2)
    if isinstance(row, ImageRow):
        return max(MIN_ROW_HEIGHT, len(row.tags) + 2)
    return MIN_ROW_HEIGHT


# --- CONTAINER DETAIL ---

def _binding_text(binding: Record) -> str:
    return f"{binding.get('HostIp') or ''}:{binding.get('HostPort') or ''}"


def port_bindings(ports: Optional[Dict[str, Optional[List[Record]]]]) -> List[str]:
    """`0.0.0.0:8080 | :::8080 -> 80/tcp` for each bound container port."""
    lines = []
    for port, bindings in (ports or {}).items():
        number, _, proto = port.partition("/")
        ipv4 = next((b for b in bindings or [] if b.get("HostIp") == "0.0.0.0"), None)
        ipv6 = next((b for b in bindings or [] if b.get("HostIp") == "::"), None)
        hosts = [_binding_text(b) for b in (ipv4, ipv6) if b is not None]
        if hosts:
            lines.append(f"{' | '.join(hosts)} -> {number}/{proto}")
    return sorted(lines)


def mount_lines(mounts: Optional[List[Record]]) -> List[str]:
    lines = []
    for mount in mounts or []:
        if mount.get("Type") == "volume":
            source = _text(mount.get("Name"))
        elif mount.get("Type"):
            source = _text(mount.get("Source"))
        else:
            source = "-"
        lines.append(f"{source} -> {_text(mount.get('Destination'))}")
    return sorted(lines)


def _as_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def container_detail(attrs: Record) -> ContainerDetail:
    config = attrs.get("Config") or {}
    host_config = attrs.get("HostConfig") or {}
    network = attrs.get("NetworkSettings") or {}
    state = attrs.get("State") or {}
    restart = (host_config.get("RestartPolicy") or {}).get("Name")

    return ContainerDetail(
        id=_text(attrs.get("Id")),
        name=_container_name([attrs["Name"]] if attrs.get("Name") else None),
        image=_text(config.get("Image")),
        created=_text(attrs.get("Created")),
        state=_text(state.get("Status")),
        ip_address=network.get("IPAddress") or "",
        start_time=_text(state.get("StartedAt")),
        restart_policy=_text(restart.replace("_", "-") if restart else None),
        cmd=_as_list(config.get("Cmd")),
        entrypoint=_as_list(config.get("Entrypoint")),
        env=sorted(_as_list(config.get("Env"))),
        labels=sorted(f"{k}: {v}" for k, v in (config.get("Labels") or {}).items()),
        ports=port_bindings(network.get("Ports")),
        mounts=mount_lines(attrs.get("Mounts")),
    )


# --- ERROR BANNERS ---

def summarize_image_error(message: str) -> str:
    match = IMAGE_IN_USE_RE.search(message)
    return ERROR_PREFIX + (match.group(0).strip() if match else FALLBACK_ERROR)


def summarize_network_error(message: str) -> str:
    match = NETWORK_ERROR_RE.search(message)
    return ERROR_PREFIX + (match.group(1).strip() if match else FALLBACK_ERROR)


def summarize_volume_error(message: str) -> str:
    match = VOLUME_IN_USE_RE.search(message)
    if match:
        return ERROR_PREFIX + f"Volume is in use by container: {match.group(1)[:15]}..."
    return ERROR_PREFIX + FALLBACK_ERROR


def summarize_error(kind: ResourceKind, message: str) -> str:
    if kind == ResourceKind.IMAGES:
        return summarize_image_error(message)
    if kind == ResourceKind.VOLUMES:
        return summarize_volume_error(message)
    if kind == ResourceKind.NETWORKS:
        return summarize_network_error(message)
    return ERROR_PREFIX + (message.strip() or FALLBACK_ERROR)
