# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""boto3 clients for the AWS services used by the provider."""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from rack_aws.config import AWS_DEFAULT_REGION
from rack_aws.exceptions import UpstreamError

if TYPE_CHECKING:
    from mypy_boto3_acm.client import ACMClient
    from mypy_boto3_ec2.client import EC2Client
    from mypy_boto3_ecs.client import ECSClient
    from mypy_boto3_iam.client import IAMClient

logger = logging.getLogger(__name__)


class AWSClients:
    """A boto3 session handing out ECS, EC2, IAM and ACM clients.

    Clients are created on first use and reused afterwards. Retries are
    disabled so that a failing call surfaces to the caller immediately.
    """

    def __init__(
        self,
        region: Optional[str] = AWS_DEFAULT_REGION,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        endpoint: Optional[str] = None,
    ):
        self.region = region
        self.endpoint = endpoint
        self._clients: Dict[str, Any] = {}
        self._config = Config(
            retries={
                "max_attempts": 1,
            },
        )
        try:
            self.session = boto3.session.Session(  # type: ignore[reportAttributeAccessIssue]
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
            )
        except (ClientError, BotoCoreError, ValueError) as e:
            logger.error("Error creating session: %s", e)
            raise UpstreamError("could not create AWS session", cause=e) from e

    def client(self, service_name: str) -> Any:
        """Return the client for the given service, creating it if needed."""
        if service_name not in self._clients:
            try:
                self._clients[service_name] = self.session.client(
                    service_name,  # type: ignore[call-overload]
                    endpoint_url=self.endpoint,
                    config=self._config,
                )
            except (ClientError, BotoCoreError, ValueError) as e:
                logger.error("Error creating %s client: %s", service_name, e)
                raise UpstreamError(f"could not create {service_name} client", cause=e) from e
            logger.debug("Created %s client in region %s", service_name, self.region)
        return self._clients[service_name]

    @property
    def ecs(self) -> "ECSClient":
        """ECS client."""
        return self.client("ecs")

    @property
    def ec2(self) -> "EC2Client":
        """EC2 client."""
        return self.client("ec2")

    @property
    def iam(self) -> "IAMClient":
        """IAM client."""
        return self.client("iam")

    @property
    def acm(self) -> "ACMClient":
        """ACM client."""
        return self.client("acm")
