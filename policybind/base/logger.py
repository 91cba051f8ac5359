"""
Structured logging for policybind.

Provides a pre-configured logger that emits JSON-structured log records
with reconcile context (resource, role, member, stage) for easy filtering
in log aggregation tools.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any

from policybind.base.models import DesiredBinding

_CONTEXT_KEYS = ("request_id", "resource", "role", "member", "stage")


class StructuredFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Attach any extras injected via PolicyBindLogger.log_operation
        for key in _CONTEXT_KEYS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = str(record.exc_info[1])
        return json.dumps(log_entry)


class PolicyBindLogger:
    """Convenience wrapper around :mod:`logging` for reconcile operations."""

    def __init__(self, name: str = "policybind") -> None:
        self.logger = logging.getLogger(name)
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

    def log_operation(
        self,
        level: int,
        message: str,
        *,
        resource: str | None = None,
        role: str | None = None,
        member: str | None = None,
        stage: str | None = None,
        request_id: str | None = None,
        exc_info: bool = False,
    ) -> None:
        """Emit a structured log record with reconcile context.

        Args:
            level: Logging level (e.g. logging.INFO).
            message: Human-readable message.
            resource: Resource whose policy is reconciled (bucket name).
            role: Role of the desired binding.
            member: Member of the desired binding.
            stage: Reconcile stage (e.g. 'create-write').
            request_id: Optional correlation ID; auto-generated if omitted.
            exc_info: Whether to include exception info.
        """
        extra = {
            "resource": resource,
            "role": role,
            "member": member,
            "stage": stage,
            "request_id": request_id or uuid.uuid4().hex[:12],
        }
        self.logger.log(level, message, extra=extra, exc_info=exc_info)

    def log_binding(
        self, level: int, message: str, binding: DesiredBinding, stage: str
    ) -> None:
        """Emit a record tagged with the binding under reconcile and its stage."""
        self.log_operation(
            level,
            message,
            resource=binding.resource_id,
            role=binding.role,
            member=binding.member,
            stage=stage,
        )


# Module-level default; adapters accept their own instance.
pb_logger = PolicyBindLogger()
