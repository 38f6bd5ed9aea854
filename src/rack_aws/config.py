# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Configuration for the AWS provider."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

AWS_DEFAULT_REGION = "us-east-1"


class ProviderConfig(BaseModel):
    """Settings read from the process environment."""

    cluster: Optional[str] = Field(
        default=None, description="Name or ARN of the ECS cluster running the Docker hosts."
    )
    docker_host: Optional[str] = Field(
        default=None, description="Docker endpoint to use instead of resolving one."
    )
    test_docker_host: Optional[str] = Field(
        default=None, description="Docker endpoint that overrides every other source."
    )
    development: bool = Field(
        default=False, description="Connect to the public address of container instances."
    )
    region: str = Field(default=AWS_DEFAULT_REGION, description="AWS region name.")

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "ProviderConfig":
        """Build the configuration from environment variables.

        Empty values are treated as unset. DEVELOPMENT is only enabled by the
        exact value "true".
        """
        if environ is None:
            environ = os.environ

        def _get(name: str) -> Optional[str]:
            return environ.get(name) or None

        return cls(
            cluster=_get("CLUSTER"),
            docker_host=_get("DOCKER_HOST"),
            test_docker_host=_get("TEST_DOCKER_HOST"),
            development=environ.get("DEVELOPMENT") == "true",
            region=_get("AWS_REGION") or _get("AWS_DEFAULT_REGION") or AWS_DEFAULT_REGION,
        )
