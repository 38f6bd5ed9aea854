# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Entry point tying configuration, AWS clients and the managers together."""

import time
from functools import cached_property
from typing import Any, Callable, List, Optional

import docker

from rack_aws.aws_session import AWSClients
from rack_aws.certificates import Certificate, CertificateManager
from rack_aws.config import ProviderConfig
from rack_aws.docker_host import DockerHostResolver, docker_client, docker_host


class AWSProvider:
    """AWS implementation of the Docker host and certificate operations."""

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        clients: Optional[AWSClients] = None,
        rng: Optional[Any] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.config = config or ProviderConfig()
        self.clients = clients or AWSClients(region=self.config.region)
        self._rng = rng
        self._clock = clock or time.time

    @classmethod
    def from_environ(cls) -> "AWSProvider":
        """Create a provider configured from environment variables."""
        return cls(config=ProviderConfig.from_environ())

    @cached_property
    def resolver(self) -> DockerHostResolver:
        """Host resolver bound to the ECS and EC2 clients."""
        return DockerHostResolver(
            ecs=self.clients.ecs,
            ec2=self.clients.ec2,
            config=self.config,
            rng=self._rng,
        )

    @cached_property
    def certificates(self) -> CertificateManager:
        """Certificate manager bound to the IAM and ACM clients."""
        return CertificateManager(iam=self.clients.iam, acm=self.clients.acm, clock=self._clock)

    def docker_host(self, host: Optional[str] = None) -> str:
        """Return the Docker endpoint, resolving it from the cluster if needed."""
        return docker_host(self.resolver, self.config, host)

    def docker(self, host: Optional[str] = None) -> docker.DockerClient:
        """Return a Docker client for the cluster."""
        return docker_client(self.resolver, self.config, host)

    def certificate_create(self, pub: str, key: str, chain: str = "") -> Certificate:
        """Upload a PEM encoded certificate to IAM."""
        return self.certificates.create(pub, key, chain)

    def certificate_delete(self, certificate_id: str) -> None:
        """Delete an uploaded certificate."""
        self.certificates.delete(certificate_id)

    def certificate_generate(self, domains: List[str]) -> Certificate:
        """Request a certificate for the domains from ACM."""
        return self.certificates.generate(domains)

    def certificate_list(self) -> List[Certificate]:
        """List uploaded and ACM certificates."""
        return self.certificates.list()
