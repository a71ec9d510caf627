import pytest

from dockdash import formatting
from dockdash.model import ContainerRow, ImageRow, NetworkRow, ResourceKind, VolumeRow

NOW = 1_700_000_000


def container(id, state, names=("/web",), ports=None, image="nginx:latest"):
    return {
        "Id": id,
        "Names": list(names),
        "Image": image,
        "State": state,
        "Ports": ports or [],
    }


# --- time_ago ---

@pytest.mark.parametrize("delta,expected", [
    (0, "0 seconds ago"),
    (1, "1 second ago"),
    (59, "59 seconds ago"),
    (60, "1 minute ago"),
    (3 * 3600, "3 hours ago"),
    (86_400, "1 day ago"),
    (2 * 2_592_000, "2 months ago"),
    (31_536_000 * 4, "4 years ago"),
])
def test_time_ago_past(delta, expected):
    assert formatting.time_ago(NOW - delta, now=NOW) == expected


def test_time_ago_future():
    assert formatting.time_ago(NOW + 7200, now=NOW) == "in 2 hours"


def test_time_ago_accepts_daemon_timestamps():
    # 2023-11-14T22:13:20Z == 1_700_000_000
    assert formatting.time_ago("2023-11-14T22:13:20.123456789Z", now=NOW + 60) == "1 minute ago"


def test_time_ago_unparseable():
    assert formatting.time_ago("yesterday", now=NOW) == "-"
    assert formatting.time_ago(None, now=NOW) == "-"


# --- containers ---

def test_container_row_fields():
    ports = [
        {"PrivatePort": 443, "PublicPort": 8443, "Type": "tcp"},
        {"PrivatePort": 80, "PublicPort": 8080, "Type": "tcp"},
        {"PrivatePort": 80, "PublicPort": 8080, "Type": "tcp"},
        {"PrivatePort": 9000, "Type": "tcp"},
    ]
    row = formatting.container_row(container("abcdef0123456789", "running", ports=ports))
    assert row.name == "web"
    assert row.short_id == "abcdef012345"
    assert row.ports == ["80:8080/tcp", "443:8443/tcp"]


def test_container_without_name():
    row = formatting.container_row(container("a", "exited", names=()))
    assert row.name == "NaN"


def test_containers_sorted_running_first():
    rows = formatting.container_rows([
        container("1", "exited"),
        container("2", "running"),
        container("3", "created"),
        container("4", "running"),
    ])
    assert [r.id for r in rows] == ["2", "4", "3", "1"]


# --- images ---

def test_image_row_strips_digest_prefix():
    row = formatting.image_row({
        "Id": "sha256:deadbeef",
        "RepoTags": ["app:1", "app:latest"],
        "Size": 104857600,
        "Created": NOW - 86_400 * 3,
    }, now=NOW)
    assert row == ImageRow(id="deadbeef", tags=["app:1", "app:latest"], size="100.0MB", created="3 days ago")


def test_images_sorted_newest_first():
    rows = formatting.image_rows([
        {"Id": "sha256:old", "Created": NOW - 100},
        {"Id": "sha256:new", "Created": NOW - 1},
    ], now=NOW)
    assert [r.id for r in rows] == ["new", "old"]


# --- volumes / networks ---

def test_volume_row_uses_name_as_id():
    row = formatting.volume_row({"Name": "data", "Driver": "local", "Mountpoint": "/var/lib/docker/volumes/data"})
    assert row.id == "data"
    assert row.driver == "local"


def test_network_rows_sorted_by_name():
    rows = formatting.network_rows([
        {"Id": "b" * 64, "Name": "host", "Driver": "host", "Created": "2024-01-02T03:04:05.678Z"},
        {"Id": "a" * 64, "Name": "bridge", "Driver": "bridge", "Created": "2024-01-01T00:00:00.1Z"},
    ])
    assert [r.name for r in rows] == ["bridge", "host"]
    assert rows[1].created == "2024-01-02T03:04:05Z"
    assert rows[0].short_id == "a" * 12 + "..."


def test_build_rows_dispatches_on_kind():
    rows = formatting.build_rows(ResourceKind.VOLUMES, [{"Name": "v"}])
    assert isinstance(rows[0], VolumeRow)
    rows = formatting.build_rows(ResourceKind.NETWORKS, [{"Id": "n" * 20, "Name": "n"}])
    assert isinstance(rows[0], NetworkRow)


# --- row heights ---

def test_row_heights():
    assert formatting.row_height(ContainerRow("a", "n", "i", "running", [])) == 3
    assert formatting.row_height(ContainerRow("a", "n", "i", "running", ["1", "2", "3"])) == 5
    assert formatting.row_height(ImageRow("a", ["t1", "t2"], "1MB", "now")) == 4
    assert formatting.row_height(VolumeRow("v", "local", "/x")) == 3


# --- detail ---

INSPECT = {
    "Id": "c0ffee",
    "Name": "/api",
    "Created": "2024-05-01T10:00:00Z",
    "Config": {
        "Image": "api:2",
        "Cmd": ["python", "-m", "api"],
        "Entrypoint": None,
        "Env": ["PATH=/usr/bin", "DEBUG=1"],
        "Labels": {"team": "core"},
    },
    "HostConfig": {"RestartPolicy": {"Name": "on-failure"}},
    "State": {"Status": "running", "StartedAt": "2024-05-01T10:00:01Z"},
    "NetworkSettings": {
        "IPAddress": "172.17.0.2",
        "Ports": {
            "80/tcp": [{"HostIp": "0.0.0.0", "HostPort": "8080"}, {"HostIp": "::", "HostPort": "8080"}],
            "443/tcp": None,
            "53/udp": [{"HostIp": "0.0.0.0", "HostPort": "5353"}],
        },
    },
    "Mounts": [
        {"Type": "volume", "Name": "pgdata", "Source": "/var/lib/docker/volumes/pgdata/_data", "Destination": "/data"},
        {"Type": "bind", "Source": "/etc/app", "Destination": "/config"},
    ],
}


def test_container_detail_projection():
    detail = formatting.container_detail(INSPECT)
    assert detail.name == "api"
    assert detail.image == "api:2"
    assert detail.is_running
    assert detail.restart_policy == "on-failure"
    assert detail.entrypoint == []
    assert detail.env == ["DEBUG=1", "PATH=/usr/bin"]
    assert detail.labels == ["team: core"]
    assert detail.ports == [
        "0.0.0.0:5353 -> 53/udp",
        "0.0.0.0:8080 | :::8080 -> 80/tcp",
    ]
    assert detail.mounts == ["/etc/app -> /config", "pgdata -> /data"]


def test_container_detail_with_sparse_record():
    detail = formatting.container_detail({"Id": "x"})
    assert detail.name == "NaN"
    assert detail.state == "-"
    assert detail.ports == []
    assert detail.ip_address == ""


# --- error banners ---

def test_image_error_summary():
    message = ("conflict: unable to delete 0123abcd (cannot be forced) - "
               "image is being used by running container 9f8e7d")
    assert formatting.summarize_image_error(message) == (
        "[ERR] (cannot be forced) - image is being used by running container 9f8e7d"
    )


def test_network_error_summary():
    message = "error while removing network: network web id 1234 has active endpoints"
    assert formatting.summarize_network_error(message) == "[ERR] network web id 1234 has active endpoints"


def test_volume_error_summary():
    message = "remove data: volume is in use - [0123456789abcdef0123]"
    assert formatting.summarize_volume_error(message) == (
        "[ERR] Volume is in use by container: 0123456789abcde..."
    )


def test_unrecognized_errors_fall_back():
    assert formatting.summarize_image_error("boom") == "[ERR] Something went wrong..."
    assert formatting.summarize_volume_error("boom") == "[ERR] Something went wrong..."
    assert formatting.summarize_error(ResourceKind.NETWORKS, "no colon here") == "[ERR] Something went wrong..."
