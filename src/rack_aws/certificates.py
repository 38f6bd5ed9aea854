# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Manage TLS server certificates stored in IAM and ACM.

Uploaded certificates live in IAM as server certificates. Certificates
requested from ACM are issued asynchronously and only show up with an
expiration once they have been validated.

Listing returns IAM certificates first, then ACM ones. IAM entries use the
server certificate name as id while ACM entries use a short id derived from
the ARN (see `rack_aws.identifiers`).
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Callable, List, MutableMapping, Optional

from botocore.exceptions import BotoCoreError, ClientError
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.x509.oid import NameOID

from rack_aws.exceptions import InvalidInputError, UpstreamError
from rack_aws.identifiers import issued_certificate_id, uploaded_certificate_id
from rack_aws.security_logger import SecurityLogger

if TYPE_CHECKING:
    from mypy_boto3_acm.client import ACMClient
    from mypy_boto3_iam.client import IAMClient

PEM_BEGIN = "-----BEGIN "
PEM_CERTIFICATE_BEGIN = "-----BEGIN CERTIFICATE-----"


class LogAdapter(logging.LoggerAdapter):
    """Adapter for the logger to prepend a prefix to all log lines."""

    prefix = "certificates"

    def process(self, msg: str, kwargs: MutableMapping) -> tuple[str, MutableMapping]:
        """Prepend the prefix to the log message."""
        return f"[{self.prefix}] {msg}", kwargs


logger = LogAdapter(logging.getLogger(__name__), {})


@dataclass(frozen=True)
class Certificate:
    """A certificate as seen by callers, whichever store holds it."""

    id: str
    domain: str
    expiration: Optional[datetime] = None


def load_certificate(pem: str) -> x509.Certificate:
    """Load the first PEM block of the given string as a certificate.

    Blocks after the first one are ignored.

    Raises:
        ValueError: The string holds no PEM block or its first block is not a certificate.
    """
    start = pem.find(PEM_BEGIN)
    if start == -1:
        raise ValueError("no PEM block found")
    if not pem.startswith(PEM_CERTIFICATE_BEGIN, start):
        raise ValueError("first PEM block is not a certificate")
    return x509.load_pem_x509_certificate(pem[start:].encode())


def common_name(certificate: x509.Certificate) -> str:
    """Return the subject common name, or an empty string if there is none."""
    attributes = certificate.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    if not attributes:
        return ""
    return str(attributes[0].value)


class CertificateManager:
    """Upload, request, list and delete certificates."""

    def __init__(
        self,
        iam: "IAMClient",
        acm: "ACMClient",
        clock: Callable[[], float] = time.time,
        security_logger: Optional[SecurityLogger] = None,
    ):
        self._iam = iam
        self._acm = acm
        self._clock = clock
        self._security_logger = security_logger or SecurityLogger()

    def create(self, pub: str, key: str, chain: str = "") -> Certificate:
        """Upload a certificate and its private key to IAM.

        The upload name is derived from the current time in seconds, so two
        uploads within the same second collide.

        Args:
            pub: PEM encoded certificate. Only the first block is uploaded.
            key: PEM encoded private key.
            chain: Optional PEM encoded intermediate chain.

        Returns:
            Certificate: The uploaded certificate.

        Raises:
            InvalidInputError: `pub` is not a PEM encoded certificate.
            UpstreamError: IAM rejected the upload.
        """
        try:
            certificate = load_certificate(pub)
        except ValueError as e:
            raise InvalidInputError("invalid certificate", cause=e) from e
        body = certificate.public_bytes(serialization.Encoding.PEM).decode()
        domain = common_name(certificate)

        request = {
            "CertificateBody": body,
            "PrivateKey": key,
            "ServerCertificateName": f"cert-{int(self._clock())}",
        }
        if chain:
            request["CertificateChain"] = chain

        try:
            response = self._iam.upload_server_certificate(**request)
        except (BotoCoreError, ClientError) as e:
            logger.error("Error uploading certificate for %s: %s", domain, e)
            raise UpstreamError("could not upload certificate", cause=e) from e

        metadata = response["ServerCertificateMetadata"]
        uploaded = Certificate(
            id=uploaded_certificate_id(metadata["Arn"]),
            domain=domain,
            expiration=metadata.get("Expiration"),
        )
        logger.info("Uploaded certificate %s for %s", uploaded.id, domain)
        self._security_logger.certificate_uploaded(uploaded.id, domain)
        return uploaded

    def delete(self, certificate_id: str) -> None:
        """Delete an uploaded certificate by name.

        Raises:
            UpstreamError: IAM refused, e.g. unknown name or certificate in use.
        """
        try:
            self._iam.delete_server_certificate(ServerCertificateName=certificate_id)
        except (BotoCoreError, ClientError) as e:
            logger.error("Error deleting certificate %s: %s", certificate_id, e)
            raise UpstreamError(f"could not delete certificate {certificate_id}", cause=e) from e
        logger.info("Deleted certificate %s", certificate_id)
        self._security_logger.certificate_deleted(certificate_id)

    def generate(self, domains: List[str]) -> Certificate:
        """Request a certificate from ACM.

        The first domain is the subject, the others are alternative names.
        The returned certificate has no expiration since ACM has not issued
        it yet.

        Raises:
            InvalidInputError: No domain was given.
            UpstreamError: ACM rejected the request.
        """
        if len(domains) < 1:
            raise InvalidInputError("must specify at least one domain")

        request: dict = {"DomainName": domains[0]}
        alternative_names = list(domains[1:])
        if alternative_names:
            request["SubjectAlternativeNames"] = alternative_names

        try:
            response = self._acm.request_certificate(**request)
        except (BotoCoreError, ClientError) as e:
            logger.error("Error requesting certificate for %s: %s", domains[0], e)
            raise UpstreamError("could not request certificate", cause=e) from e

        requested = Certificate(
            id=issued_certificate_id(response["CertificateArn"]),
            domain=domains[0],
        )
        logger.info("Requested certificate %s for %s", requested.id, ", ".join(domains))
        self._security_logger.certificate_requested(requested.id, list(domains))
        return requested

    def list(self) -> List[Certificate]:
        """Return every uploaded certificate followed by every ACM certificate.

        Raises:
            UpstreamError: Any call failed or a stored certificate could not
                be parsed. No partial list is returned.
        """
        return self._list_uploaded() + self._list_issued()

    def _list_uploaded(self) -> List[Certificate]:
        certificates = []
        try:
            pages = self._iam.get_paginator("list_server_certificates").paginate()
            for page in pages:
                for metadata in page["ServerCertificateMetadataList"]:
                    certificates.append(self._get_uploaded(metadata))
        except (BotoCoreError, ClientError) as e:
            logger.error("Error listing server certificates: %s", e)
            raise UpstreamError("could not list server certificates", cause=e) from e
        logger.debug("Found %d server certificates", len(certificates))
        return certificates

    def _get_uploaded(self, metadata: dict) -> Certificate:
        name = metadata["ServerCertificateName"]
        response = self._iam.get_server_certificate(ServerCertificateName=name)
        try:
            certificate = load_certificate(response["ServerCertificate"]["CertificateBody"])
        except ValueError as e:
            logger.error("Error parsing server certificate %s: %s", name, e)
            raise UpstreamError(f"could not parse server certificate {name}", cause=e) from e
        return Certificate(
            id=name,
            domain=common_name(certificate),
            expiration=metadata.get("Expiration"),
        )

    def _list_issued(self) -> List[Certificate]:
        certificates = []
        try:
            pages = self._acm.get_paginator("list_certificates").paginate()
            for page in pages:
                for summary in page["CertificateSummaryList"]:
                    certificates.append(self._get_issued(summary))
        except (BotoCoreError, ClientError) as e:
            logger.error("Error listing ACM certificates: %s", e)
            raise UpstreamError("could not list ACM certificates", cause=e) from e
        logger.debug("Found %d ACM certificates", len(certificates))
        return certificates

    def _get_issued(self, summary: dict) -> Certificate:
        arn = summary["CertificateArn"]
        response = self._acm.describe_certificate(CertificateArn=arn)
        return Certificate(
            id=issued_certificate_id(arn),
            domain=summary["DomainName"],
            expiration=response["Certificate"].get("NotAfter"),
        )
