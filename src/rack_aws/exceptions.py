# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Exceptions raised by the AWS provider."""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """The category of a provider failure.

    INVALID_INPUT: The caller supplied unusable input (bad PEM, no domains).
    NOT_FOUND: The cluster has no container instances to pick from.
    INVALID_STATE: Two AWS APIs disagree about the same entity.
    UPSTREAM: An AWS or Docker call failed.
    """

    INVALID_INPUT = "invalid-input"
    NOT_FOUND = "not-found"
    INVALID_STATE = "invalid-state"
    UPSTREAM = "upstream"


class ProviderError(Exception):
    """Base class for errors raised by the provider."""

    kind: ErrorKind = ErrorKind.UPSTREAM

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.message = message
        self.cause = cause
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"


class InvalidInputError(ProviderError):
    """Exception raised when the caller's input cannot be used."""

    kind = ErrorKind.INVALID_INPUT


class NotFoundError(ProviderError):
    """Exception raised when no container instance could be found."""

    kind = ErrorKind.NOT_FOUND


class InvalidStateError(ProviderError):
    """Exception raised when AWS returns inconsistent data."""

    kind = ErrorKind.INVALID_STATE


class UpstreamError(ProviderError):
    """Exception raised when a call to AWS or Docker fails."""

    kind = ErrorKind.UPSTREAM
