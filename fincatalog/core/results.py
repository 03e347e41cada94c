# -*- coding: utf-8 -*-
"""
Operation Results - Status taxonomy for catalog lifecycle operations.

Public lifecycle operations report a LifecycleResult instead of letting
exceptions cross into the caller. The exception classes here are raised
inside the archive layer and translated by the orchestrator.

Author
------
Duane Smalley, PhD
duane.d.smalley@gmail.com

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-10-19

Modified
--------
2026-10-19
"""

# Standard library
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union


class LifecycleStatus(Enum):
    """Outcome of a lifecycle operation."""

    OK = "ok"
    UNREADABLE = "unreadable"
    FORMAT_UNRECOGNIZED = "format_unrecognized"
    USER_DECLINED_OVERWRITE = "user_declined_overwrite"
    PARTIAL_ARCHIVE_FAILURE = "partial_archive_failure"
    ARCHIVE_TOOL_FAILURE = "archive_tool_failure"
    MISSING_MODIFIED_IMAGE = "missing_modified_image"


_SUCCESS = (LifecycleStatus.OK, LifecycleStatus.PARTIAL_ARCHIVE_FAILURE)


class LifecycleResult:
    """Result of a lifecycle operation.

    Parameters
    ----------
    status : LifecycleStatus
    path : Optional[Path]
        Primary artifact (archive written, catalog restored, ...).
    message : str
        Human-readable detail.
    record : Any
        Fin record involved, for single-fin operations.
    """

    def __init__(
        self,
        status: LifecycleStatus,
        path: Optional[Union[str, Path]] = None,
        message: str = "",
        record: Any = None,
    ) -> None:
        self.status = status
        self.path = Path(path) if path is not None else None
        self.message = message
        self.record = record

    @property
    def ok(self) -> bool:
        """True for complete and partial (locked files skipped) success."""
        return self.status in _SUCCESS

    def __bool__(self) -> bool:
        return self.ok

    def __repr__(self) -> str:
        return f"LifecycleResult({self.status.value}, path={self.path})"


class FinCatalogError(Exception):
    """Base class for catalog lifecycle errors."""


class ArchiveToolError(FinCatalogError):
    """The external archiver could not be started."""


class MissingModifiedImageError(FinCatalogError):
    """A record lacks the modified image required for packaging."""
