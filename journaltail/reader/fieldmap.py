"""Readable names for reserved journal fields."""

from types import MappingProxyType
from typing import Mapping

PRETTY_FIELD_MAP: Mapping[str, str] = MappingProxyType({
    # User fields with well-known meaning
    "MESSAGE": "message",
    "MESSAGE_ID": "message_id",
    "PRIORITY": "priority",
    "CODE_FILE": "code_file",
    "CODE_LINE": "code_line",
    "CODE_FUNC": "code_func",
    "ERRNO": "errno",
    "SYSLOG_FACILITY": "syslog_facility",
    "SYSLOG_IDENTIFIER": "syslog_identifier",
    "SYSLOG_PID": "syslog_pid",
    # Trusted fields added by journald
    "_PID": "pid",
    "_UID": "uid",
    "_GID": "gid",
    "_COMM": "comm",
    "_EXE": "exe",
    "_CMDLINE": "cmdline",
    "_AUDIT_SESSION": "audit_session",
    "_AUDIT_LOGINUID": "audit_loginuid",
    "_SYSTEMD_CGROUP": "systemd_cgroup",
    "_SYSTEMD_SESSION": "systemd_session",
    "_SYSTEMD_UNIT": "systemd_unit",
    "_SYSTEMD_USER_UNIT": "systemd_user_unit",
    "_SYSTEMD_OWNER_UID": "systemd_owner_uid",
    "_SELINUX_CONTEXT": "selinux_context",
    "_SOURCE_REALTIME_TIMESTAMP": "source_realtime_timestamp",
    "_BOOT_ID": "boot_id",
    "_MACHINE_ID": "machine_id",
    "_HOSTNAME": "hostname",
    "_TRANSPORT": "transport",
    # Kernel fields
    "_KERNEL_DEVICE": "kernel_device",
    "_KERNEL_SUBSYSTEM": "kernel_subsystem",
    "_UDEV_SYSNAME": "udev_sysname",
    "_UDEV_DEVNODE": "udev_devnode",
    "_UDEV_DEVLINK": "udev_devlink",
})


def pretty_key(name: str, field_map: Mapping[str, str] = PRETTY_FIELD_MAP) -> str:
    """
    Get the readable name for a journal field.

    Known fields use the table; anything else is lowercased with its
    leading underscores removed (``_FOO_BAR`` -> ``foo_bar``).
    """
    mapped = field_map.get(name)
    if mapped is not None:
        return mapped
    return name.lower().lstrip("_")
