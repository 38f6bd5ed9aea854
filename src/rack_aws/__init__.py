# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""AWS provider glue for Docker host discovery and TLS certificate management."""

from rack_aws.certificates import Certificate, CertificateManager
from rack_aws.config import ProviderConfig
from rack_aws.docker_host import DockerHostResolver
from rack_aws.exceptions import (
    ErrorKind,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    ProviderError,
    UpstreamError,
)
from rack_aws.provider import AWSProvider

__all__ = [
    "AWSProvider",
    "Certificate",
    "CertificateManager",
    "DockerHostResolver",
    "ErrorKind",
    "InvalidInputError",
    "InvalidStateError",
    "NotFoundError",
    "ProviderConfig",
    "ProviderError",
    "UpstreamError",
]
