"""Design tokens keyed by closed domain enums.

Each table must cover every member of its enum; a missing entry is a
programming error caught when this module is imported, never a silent
fallback colour at render time.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

__all__ = [
    "ROLE_COLORS",
    "ROLE_LABELS",
    "RecordStatus",
    "STATUS_COLORS",
    "TOAST_COLORS",
    "ToastVariant",
    "UserRole",
    "role_color",
    "role_label",
    "status_color",
    "toast_colors",
]


class UserRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    PROVIDER_ADMIN = "provider_admin"
    PROVIDER_HR_STAFF = "provider_hr_staff"
    HRBP = "hrbp"
    COMPANY_ADMIN = "company_admin"
    DEPARTMENT_HEAD = "department_head"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class RecordStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class ToastVariant(str, Enum):
    DEFAULT = "default"
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


ROLE_LABELS: Mapping[UserRole, str] = MappingProxyType(
    {
        UserRole.SUPER_ADMIN: "Super Admin",
        UserRole.PROVIDER_ADMIN: "Provider Admin",
        UserRole.PROVIDER_HR_STAFF: "Provider HR Staff",
        UserRole.HRBP: "HRBP",
        UserRole.COMPANY_ADMIN: "Company Admin",
        UserRole.DEPARTMENT_HEAD: "Department Head",
        UserRole.MANAGER: "Manager",
        UserRole.EMPLOYEE: "Employee",
    }
)

ROLE_COLORS: Mapping[UserRole, str] = MappingProxyType(
    {
        UserRole.SUPER_ADMIN: "#dc2626",
        UserRole.PROVIDER_ADMIN: "#ea580c",
        UserRole.PROVIDER_HR_STAFF: "#d97706",
        UserRole.HRBP: "#ca8a04",
        UserRole.COMPANY_ADMIN: "#16a34a",
        UserRole.DEPARTMENT_HEAD: "#0d9488",
        UserRole.MANAGER: "#2563eb",
        UserRole.EMPLOYEE: "#475569",
    }
)

STATUS_COLORS: Mapping[RecordStatus, str] = MappingProxyType(
    {
        RecordStatus.ACTIVE: "#16a34a",
        RecordStatus.INACTIVE: "#6b7280",
    }
)

# (background, foreground) per toast variant.
TOAST_COLORS: Mapping[ToastVariant, tuple[str, str]] = MappingProxyType(
    {
        ToastVariant.DEFAULT: ("#ffffff", "#111827"),
        ToastVariant.SUCCESS: ("#dff5e1", "#14532d"),
        ToastVariant.ERROR: ("#ffd9d9", "#7f1d1d"),
        ToastVariant.WARNING: ("#fff4cf", "#713f12"),
        ToastVariant.INFO: ("#d9ecff", "#1e3a8a"),
    }
)


def role_label(role: UserRole | str) -> str:
    return ROLE_LABELS[UserRole(role)]


def role_color(role: UserRole | str) -> str:
    return ROLE_COLORS[UserRole(role)]


def status_color(status: RecordStatus | str) -> str:
    return STATUS_COLORS[RecordStatus(status)]


def toast_colors(variant: ToastVariant | str) -> tuple[str, str]:
    return TOAST_COLORS[ToastVariant(variant)]


def _validate_token_tables() -> None:
    tables: tuple[tuple[str, type[Enum], Mapping], ...] = (
        ("ROLE_LABELS", UserRole, ROLE_LABELS),
        ("ROLE_COLORS", UserRole, ROLE_COLORS),
        ("STATUS_COLORS", RecordStatus, STATUS_COLORS),
        ("TOAST_COLORS", ToastVariant, TOAST_COLORS),
    )
    for name, enum_type, table in tables:
        missing = [member.value for member in enum_type if member not in table]
        if missing:
            raise ValueError(
                f"Design tokens / {name}: missing entries for {missing}. "
                f"Fix: add a value for every {enum_type.__name__} member."
            )
        extra = [key for key in table if not isinstance(key, enum_type)]
        if extra:
            raise ValueError(
                f"Design tokens / {name}: keys {extra!r} are not {enum_type.__name__} members. "
                "Fix: key the table by enum members only."
            )


_validate_token_tables()
