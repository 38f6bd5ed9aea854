# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Find the Docker daemon running on an ECS cluster's container instances."""

import logging
import random
from typing import TYPE_CHECKING, Any, MutableMapping, Optional

import docker
from botocore.exceptions import BotoCoreError, ClientError
from docker.errors import DockerException

from rack_aws.config import ProviderConfig
from rack_aws.exceptions import (
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    UpstreamError,
)

if TYPE_CHECKING:
    from mypy_boto3_ec2.client import EC2Client
    from mypy_boto3_ecs.client import ECSClient

DOCKER_PORT = 2376


class LogAdapter(logging.LoggerAdapter):
    """Adapter for the logger to prepend a prefix to all log lines."""

    prefix = "docker_host"

    def process(self, msg: str, kwargs: MutableMapping) -> tuple[str, MutableMapping]:
        """Prepend the prefix to the log message."""
        return f"[{self.prefix}] {msg}", kwargs


logger = LogAdapter(logging.getLogger(__name__), {})


class DockerHostResolver:
    """Pick a container instance of the cluster and build its Docker endpoint."""

    def __init__(
        self,
        ecs: "ECSClient",
        ec2: "EC2Client",
        config: ProviderConfig,
        rng: Optional[Any] = None,
    ):
        self._ecs = ecs
        self._ec2 = ec2
        self._config = config
        self._rng = rng if rng is not None else random

    def resolve(self) -> str:
        """Return the Docker endpoint of a randomly chosen container instance.

        Returns:
            str: An endpoint of the form http://<address>:2376

        Raises:
            InvalidInputError: No cluster is configured.
            NotFoundError: The cluster has no container instances.
            InvalidStateError: EC2 does not describe exactly one matching instance.
            UpstreamError: An ECS or EC2 call failed.
        """
        cluster = self._config.cluster
        if not cluster:
            raise InvalidInputError("no cluster configured")

        instance_arns = self._list_container_instances(cluster)
        if not instance_arns:
            raise NotFoundError(f"no container instances in cluster {cluster}")

        container_instances = self._describe_container_instances(cluster, instance_arns)
        if not container_instances:
            raise NotFoundError(f"no container instances in cluster {cluster}")

        instance_id = self._rng.choice(container_instances)["ec2InstanceId"]
        logger.debug("Selected instance %s out of %d", instance_id, len(container_instances))

        instance = self._describe_instance(instance_id)
        address = self._select_address(instance)
        return f"http://{address}:{DOCKER_PORT}"

    def _list_container_instances(self, cluster: str) -> list[str]:
        try:
            response = self._ecs.list_container_instances(cluster=cluster)
        except (BotoCoreError, ClientError) as e:
            logger.error("Error listing container instances of cluster %s: %s", cluster, e)
            raise UpstreamError("could not list container instances", cause=e) from e
        return response.get("containerInstanceArns", [])

    def _describe_container_instances(self, cluster: str, instance_arns: list[str]) -> list:
        try:
            response = self._ecs.describe_container_instances(
                cluster=cluster,
                containerInstances=instance_arns,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Error describing container instances of cluster %s: %s", cluster, e)
            raise UpstreamError("could not describe container instances", cause=e) from e
        return response.get("containerInstances", [])

    def _describe_instance(self, instance_id: str) -> dict:
        try:
            response = self._ec2.describe_instances(
                Filters=[{"Name": "instance-id", "Values": [instance_id]}]
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Error describing instance %s: %s", instance_id, e)
            raise UpstreamError(f"could not describe instance {instance_id}", cause=e) from e

        reservations = response.get("Reservations", [])
        if len(reservations) != 1 or len(reservations[0].get("Instances", [])) != 1:
            raise InvalidStateError(f"could not describe container instance {instance_id}")
        return reservations[0]["Instances"][0]

    def _select_address(self, instance: dict) -> str:
        if self._config.development:
            address = instance.get("PublicIpAddress")
        else:
            address = instance.get("PrivateIpAddress")
        if not address:
            raise InvalidStateError(
                "container instance %s has no %s address"
                % (instance.get("InstanceId"), "public" if self._config.development else "private")
            )
        return address


def docker_host(
    resolver: DockerHostResolver,
    config: ProviderConfig,
    host: Optional[str] = None,
) -> str:
    """Return the Docker endpoint to connect to.

    TEST_DOCKER_HOST wins over everything, then an explicit host, then
    DOCKER_HOST. The cluster is only queried when none of them is set.
    """
    if config.test_docker_host:
        return config.test_docker_host
    if host:
        return host
    if config.docker_host:
        return config.docker_host
    return resolver.resolve()


def docker_client(
    resolver: DockerHostResolver,
    config: ProviderConfig,
    host: Optional[str] = None,
) -> docker.DockerClient:
    """Return a Docker client connected to the cluster's Docker endpoint."""
    endpoint = docker_host(resolver, config, host)
    try:
        return docker.DockerClient(base_url=endpoint)
    except DockerException as e:
        logger.error("Error creating Docker client for %s: %s", endpoint, e)
        raise UpstreamError(f"could not connect to Docker at {endpoint}", cause=e) from e
