"""Lifecycle phases of a ``ServicePackage`` and the rules moving between them."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Mapping

PENDING = "Pending"
RUNNING = "Running"
SUCCEEDED = "Succeeded"
FAILED = "Failed"
UNKNOWN = "Unknown"
UPGRADING = "Upgrading"
DELETING = "Deleting"
DELETED = "Deleted"

UPGRADE_REASON = "Upgrade the operator"


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _timestamp(value: dt.datetime) -> str:
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class PackageStatus:
    current_version: str = ""
    phase: str = ""
    reason: str = ""
    last_schedule_time: dt.datetime | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "PackageStatus":
        data = data or {}
        return cls(
            current_version=str(data.get("currentVersion") or ""),
            phase=str(data.get("phase") or ""),
            reason=str(data.get("reason") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "currentVersion": self.current_version,
            "phase": self.phase,
            "reason": self.reason,
        }
        if self.last_schedule_time is not None:
            out["lastScheduleTime"] = _timestamp(self.last_schedule_time)
        return out


@dataclass
class ServicePackage:
    name: str
    version: str = ""
    resources: str = ""
    status: PackageStatus = field(default_factory=PackageStatus)

    @classmethod
    def from_body(cls, body: Mapping[str, Any]) -> "ServicePackage":
        spec = body.get("spec") or {}
        return cls(
            name=str(spec.get("name") or ""),
            version=str(spec.get("version") or ""),
            resources=str(spec.get("resources") or ""),
            status=PackageStatus.from_dict(body.get("status")),
        )

    def verify_status(self) -> None:
        self.status.reason = ""
        if not self.status.current_version and not self.is_deleting():
            self.set_to_pending()
            return
        if not self.version:
            self.set_to_deleting()
            return
        if self.version != self.status.current_version and not self.is_deleting():
            self.set_to_upgrading()

    def _settle(self, phase: str) -> None:
        self.status.phase = phase
        self.status.reason = ""
        self.status.current_version = self.version
        self.status.last_schedule_time = _now()

    def set_to_pending(self) -> None:
        self._settle(PENDING)

    def set_to_succeeded(self) -> None:
        self._settle(SUCCEEDED)

    def _append_reason(self, reason: str) -> None:
        if self._is_exception():
            self.status.reason = f"{self.status.reason}; {reason}"
        else:
            self.status.reason = reason

    def set_to_failed(self, reason: str) -> None:
        self._append_reason(reason)
        self.status.phase = FAILED
        self.status.last_schedule_time = _now()

    def set_to_upgrading(self) -> None:
        self.status.phase = UPGRADING
        self.status.reason = UPGRADE_REASON
        self.status.last_schedule_time = _now()

    def set_to_deleting(self) -> None:
        now = _now()
        self.status.phase = DELETING
        self.status.reason = f"begin [{_timestamp(now)}] to delete the service instance [{self.name}]"
        self.status.last_schedule_time = now

    def set_to_deleted(self) -> None:
        now = _now()
        self.status.phase = DELETED
        self.status.current_version = ""
        self.status.reason = f"at [{_timestamp(now)}] the service instance [{self.name}] has been deleted"
        self.status.last_schedule_time = now

    def update_status(self, err: BaseException | None = None) -> None:
        """Final reconcile step: settle transient phases, or record ``err``."""
        if err is not None:
            self.set_to_failed(str(err))
            return
        if self.status.phase in (PENDING, UPGRADING):
            self.set_to_succeeded()
        elif self.status.phase == DELETING:
            self.set_to_deleted()

    def is_deleting(self) -> bool:
        return self.status.phase in (DELETING, DELETED)

    def is_deleted(self) -> bool:
        return self.status.phase == DELETED

    def is_upgrading(self) -> bool:
        return self.status.phase == UPGRADING or (
            self.status.current_version != self.version and self.version != ""
        )

    def _is_exception(self) -> bool:
        return self.status.phase in (FAILED, UNKNOWN)
