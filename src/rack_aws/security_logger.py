# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""OWASP-style security events for certificate changes.

Events are emitted as a nested JSON structure that is easy to parse and index.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

NESTED_JSON_KEY = "owasp_event"


@dataclass
class _OWASPLogEvent:
    """OWASP-compliant log event payload."""

    datetime: str
    event: str
    level: str
    description: str
    type: str = "security"
    labels: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        log_event = dict(asdict(self), **self.labels)
        log_event.pop("labels", None)
        return {k: v for k, v in log_event.items() if v is not None}


class SecurityLogger:
    """Emit certificate lifecycle events under NESTED_JSON_KEY."""

    def __init__(self, application: str = "rack"):
        self._application = application
        self._logger = logging.getLogger(__name__)

    def log_event(self, *, event: str, level: int, description: str, **labels: str | None) -> None:
        """Log a security event with the given labels."""
        level_name = logging.getLevelName(level)
        event_obj = _OWASPLogEvent(
            datetime=datetime.now(timezone.utc).isoformat(),
            event=event,
            level=str(level_name),
            description=description,
            labels={
                "application": self._application,
                **{k: v for k, v in labels.items() if v is not None},
            },
        )
        payload = {NESTED_JSON_KEY: event_obj.to_dict()}
        self._logger.log(level, json.dumps(payload, ensure_ascii=False))

    def certificate_uploaded(self, certificate_id: str, domain: str) -> None:
        """Log the upload of a server certificate."""
        self.log_event(
            event="certificate_uploaded",
            level=logging.INFO,
            description=f"Server certificate for {domain} uploaded.",
            certificate_id=certificate_id,
            domain=domain,
        )

    def certificate_deleted(self, certificate_id: str) -> None:
        """Log the deletion of a server certificate."""
        self.log_event(
            event="certificate_deleted",
            level=logging.WARNING,
            description=f"Server certificate {certificate_id} deleted.",
            certificate_id=certificate_id,
        )

    def certificate_requested(self, certificate_id: str, domains: list[str]) -> None:
        """Log a certificate request to ACM."""
        self.log_event(
            event="certificate_requested",
            level=logging.INFO,
            description=f"Certificate requested for {', '.join(domains)}.",
            certificate_id=certificate_id,
            domain=domains[0],
        )
