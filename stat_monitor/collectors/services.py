"""
Service status collectors.

Each provider answers a single question: is the named service active right
now. The sampler maps the answer to 1.0 / 0.0.
"""
import subprocess
import logging

try:
    import docker
    DOCKER_AVAILABLE = True
except ImportError:
    DOCKER_AVAILABLE = False

from ..errors import SampleError

logger = logging.getLogger(__name__)


class ServiceStatusProvider:
    """Interface for service status checks."""

    def is_active(self, name: str) -> bool:
        raise NotImplementedError


class SystemdStatusProvider(ServiceStatusProvider):
    """
    Check a systemd unit with ``systemctl is-active --quiet``.

    Any non-zero exit status counts as inactive. A missing systemctl binary or
    a hung call is a sampling failure, not an inactive service.
    """

    def __init__(self, timeout: float = 10):
        self.timeout = timeout

    def is_active(self, name: str) -> bool:
        try:
            result = subprocess.run(
                ['systemctl', 'is-active', '--quiet', name],
                capture_output=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            raise SampleError(f'systemctl timed out checking {name}') from e
        except FileNotFoundError as e:
            raise SampleError('systemctl not available') from e

        return result.returncode == 0


class DockerStatusProvider(ServiceStatusProvider):
    """
    Check a Docker container by name.

    A container counts as active only while its status is ``running``; a
    container that does not exist is inactive.
    """

    def __init__(self, timeout: int = 10):
        self.timeout = timeout
        self._client = None

    def is_active(self, name: str) -> bool:
        if not DOCKER_AVAILABLE:
            raise SampleError('Docker SDK not installed')

        try:
            client = self._get_client()
            container = client.containers.get(name)
        except docker.errors.NotFound:
            return False
        except docker.errors.DockerException as e:
            logger.debug(f"Docker daemon unavailable: {e}")
            self._reset_client()
            raise SampleError(f'Docker daemon unavailable: {e}') from e

        return container.status == 'running'

    def _get_client(self):
        if self._client is None:
            self._client = docker.from_env(timeout=self.timeout)
        return self._client

    def _reset_client(self):
        client, self._client = self._client, None
        if client is not None:
            try:
                client.close()
            except docker.errors.DockerException as e:
                logger.debug(f"Error closing Docker client: {e}")
