"""
Docker API wrapper used by the controller.

This module is the daemon boundary. It talks to the Docker Engine through
the docker-py library and returns raw records (the SDK's `.attrs` dicts);
turning them into rows is formatting.py's job.

Key Classes:
  - DockerBackend: blocking docker.DockerClient wrapper (the controller
    calls it through asyncio.to_thread)
  - BackendError: the single error type callers need to handle

Error Handling:
  Every public method is wrapped with @docker_call, which logs the failure
  and re-raises it as BackendError carrying the daemon's message. Callers
  decide what a failure means (retry, banner or skip); nothing here returns
  a silent default.

  - Docker unreachable at startup → client is None, every call raises
    BackendError("Docker not connected")
  - API errors (404, 409 conflict, 500) → BackendError(explanation)

Dependencies:
  - docker>=7.0.0 (docker-py client)
"""

import functools
import logging
from typing import Any, Callable, Dict, List, Optional

import docker
from docker.errors import APIError, DockerException

from .model import ResourceKind

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class BackendError(Exception):
    """A daemon call failed; str(err) is the daemon's human-readable message."""


def _error_message(exc: Exception) -> str:
    if isinstance(exc, APIError) and exc.explanation:
        return str(exc.explanation)
    return str(exc) or exc.__class__.__name__


def docker_call(func: Callable) -> Callable:
    """
    Decorator for Docker API methods that normalizes failures.

    Logs the original exception and raises BackendError so the controller
    only ever has to catch one type.

    Usage:
        @docker_call
        def stop_container(self, container_id: str) -> None:
            ...
    """
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> Any:
        if self.client is None:
            raise BackendError("Docker not connected")
        try:
            return func(self, *args, **kwargs)
        except DockerException as e:
            logger.error(f"Docker operation failed in {func.__name__}: {e}", exc_info=True)
            raise BackendError(_error_message(e)) from e
    return wrapper


class DockerBackend:
    def __init__(self, base_url: Optional[str] = None, timeout: int = 60):
        try:
            if base_url:
                self.client = docker.DockerClient(base_url=base_url, timeout=timeout)
            else:
                self.client = docker.from_env(timeout=timeout)
        except DockerException as e:
            logger.error(f"Could not connect to Docker: {e}")
            self.client = None

    @property
    def connected(self) -> bool:
        return self.client is not None

    # Listing

    @docker_call
    def list_containers(self) -> List[Record]:
        return [c.attrs for c in self.client.containers.list(all=True, sparse=True)]

    @docker_call
    def list_images(self) -> List[Record]:
        return [i.attrs for i in self.client.images.list()]

    @docker_call
    def list_volumes(self) -> List[Record]:
        return [v.attrs for v in self.client.volumes.list()]

    @docker_call
    def list_networks(self) -> List[Record]:
        return [n.attrs for n in self.client.networks.list()]

    def list_resources(self, kind: ResourceKind) -> List[Record]:
        if kind == ResourceKind.CONTAINERS:
            return self.list_containers()
        if kind == ResourceKind.IMAGES:
            return self.list_images()
        if kind == ResourceKind.VOLUMES:
            return self.list_volumes()
        return self.list_networks()

    @docker_call
    def inspect_container(self, container_id: str) -> Record:
        return self.client.containers.get(container_id).attrs

    # Actions

    @docker_call
    def restart_container(self, container_id: str) -> None:
        self.client.containers.get(container_id).restart()

    @docker_call
    def stop_container(self, container_id: str) -> None:
        self.client.containers.get(container_id).stop()

    @docker_call
    def kill_container(self, container_id: str) -> None:
        self.client.containers.get(container_id).kill()

    @docker_call
    def remove_container(self, container_id: str, force: bool = True) -> None:
        self.client.containers.get(container_id).remove(force=force)

    @docker_call
    def remove_image(self, image_id: str, force: bool = False) -> None:
        self.client.images.remove(image_id, force=force)

    @docker_call
    def remove_volume(self, volume_name: str, force: bool = False) -> None:
        self.client.volumes.get(volume_name).remove(force=force)

    @docker_call
    def remove_network(self, network_id: str) -> None:
        self.client.networks.get(network_id).remove()

    def remove_resource(self, kind: ResourceKind, resource_id: str, force: bool = False) -> None:
        if kind == ResourceKind.CONTAINERS:
            self.remove_container(resource_id, force=force)
        elif kind == ResourceKind.IMAGES:
            self.remove_image(resource_id, force=force)
        elif kind == ResourceKind.VOLUMES:
            self.remove_volume(resource_id, force=force)
        else:
            self.remove_network(resource_id)

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
