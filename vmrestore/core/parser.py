"""Backup filename parser — turns remote listing entries into BackupRecords.

Two layouts are recognised, tried in this order:

  vm_delta_{tag}_{source_id}/{date}_{machine}    delta backup chain member
  {date}_{tag}_{machine}.xva                     full XVA export

``{date}`` is a UTC timestamp encoded as ``YYYYMMDDTHHMMSSZ``.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from loguru import logger

from vmrestore.models.backup_record import BackupKind, BackupRecord

# Whole-entry patterns, used with fullmatch
DELTA_PATTERN = re.compile(r"vm_delta_(.*)_([^/]+)/([^_]+)_(.*)")
SIMPLE_PATTERN = re.compile(r"([^_]+)_([^_]+)_(.*)\.xva")
DATE_TOKEN_PATTERN = re.compile(r"[0-9]{8}T[0-9]{6}Z")

BACKUP_DATE_FORMAT = "%Y%m%dT%H%M%SZ"


def parse_backup_date(token: str) -> datetime:
    """Parse a ``YYYYMMDDTHHMMSSZ`` token as an aware UTC datetime.

    Raises ValueError for anything else, including impossible dates.
    """
    if not DATE_TOKEN_PATTERN.fullmatch(token):
        raise ValueError(f"Not a YYYYMMDDTHHMMSSZ timestamp: {token!r}")
    return datetime.strptime(token, BACKUP_DATE_FORMAT).replace(tzinfo=timezone.utc)


def parse_entry(entry: str, remote_id: str = "") -> BackupRecord | None:
    """Parse one listing entry. Returns None for entries that are not backups."""
    match = DELTA_PATTERN.fullmatch(entry)
    if match:
        tag, source_id, date_token, machine_name = match.groups()
        kind = BackupKind.DELTA
    else:
        match = SIMPLE_PATTERN.fullmatch(entry)
        if not match:
            return None
        date_token, tag, machine_name = match.groups()
        source_id = ""
        kind = BackupKind.SIMPLE

    try:
        timestamp = parse_backup_date(date_token)
    except ValueError:
        logger.debug(f"Skipping entry with invalid backup date: {entry}")
        return None

    return BackupRecord(
        kind=kind,
        timestamp=timestamp,
        machine_name=machine_name,
        tag=tag,
        path=entry,
        remote_id=remote_id,
        source_id=source_id,
    )


def parse_entries(entries: list[str], remote_id: str = "") -> list[BackupRecord]:
    """Parse a whole listing, dropping non-backup entries, keeping listing order."""
    records: list[BackupRecord] = []
    for entry in entries:
        record = parse_entry(entry, remote_id)
        if record is not None:
            records.append(record)
    return records
