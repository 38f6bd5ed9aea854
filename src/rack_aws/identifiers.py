# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Helpers deriving short certificate ids from AWS ARNs.

Both helpers split on a separator character rather than parsing the ARN. ACM
ARNs end in a UUID, so only the last group of the UUID survives the split.
Keep them here so callers never split ARNs themselves.
"""

ISSUED_CERTIFICATE_ID_PREFIX = "acm-"


def uploaded_certificate_id(arn: str) -> str:
    """Return the last path segment of an IAM server certificate ARN."""
    return arn.split("/")[-1]


def issued_certificate_id(arn: str) -> str:
    """Return the short id of an ACM certificate ARN.

    Example:
        arn:aws:acm:us-east-1:123456789012:certificate/12345678-abcd-1234 -> acm-1234
    """
    return f"{ISSUED_CERTIFICATE_ID_PREFIX}{arn.split('-')[-1]}"


def is_issued_certificate_id(certificate_id: str) -> bool:
    """Return whether the id belongs to an ACM issued certificate."""
    return certificate_id.startswith(ISSUED_CERTIFICATE_ID_PREFIX)
