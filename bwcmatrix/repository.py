# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
S3 snapshot repository settings - Parsing and validation.

Snapshot repositories are registered with a flat settings mapping such as:

    {"bucket": "snapshots", "chunk_size": "1gb", "storage_class": "standard_ia"}

This module turns such a mapping into an immutable, validated settings
object. It never talks to S3; it only rejects settings the repository
could not work with.
"""

from dataclasses import dataclass
from typing import Any, List, Mapping
import re

import structlog

from bwcmatrix.exceptions import RepositorySettingsError


REPOSITORY_TYPE = "s3"

KB = 1024
MB = 1024 * KB
GB = 1024 * MB
TB = 1024 * GB
PB = 1024 * TB

_BYTE_UNITS = {"b": 1, "kb": KB, "mb": MB, "gb": GB, "tb": TB, "pb": PB}
_TIME_UNITS = {"nanos": 1e-9, "micros": 1e-6, "ms": 1e-3, "s": 1.0, "m": 60.0, "h": 3600.0, "d": 86400.0}

# Multipart upload API limits
MIN_PART_SIZE_USING_MULTIPART = 5 * MB
MAX_PART_SIZE_USING_MULTIPART = 5 * GB
MAX_FILE_SIZE_USING_MULTIPART = 5 * TB

DEFAULT_BUFFER_SIZE = 100 * MB
DEFAULT_CHUNK_SIZE = 1 * GB
DEFAULT_MULTIPART_UPLOAD_MINIMUM_PART_SIZE = 16 * MB
DEFAULT_COOLDOWN_PERIOD_SECONDS = 180.0

STORAGE_CLASSES = frozenset(
    {
        "standard",
        "reduced_redundancy",
        "standard_ia",
        "onezone_ia",
        "intelligent_tiering",
        "glacier",
        "deep_archive",
        "glacier_ir",
        "outposts",
    }
)
UNSUPPORTED_STORAGE_CLASSES = frozenset({"glacier"})

CANNED_ACLS = frozenset(
    {
        "private",
        "public-read",
        "public-read-write",
        "authenticated-read",
        "aws-exec-read",
        "bucket-owner-read",
        "bucket-owner-full-control",
    }
)

# Settings that system repositories must not override
RESTRICTED_SYSTEM_SETTINGS = ("bucket", "base_path")

_DEPRECATED_CREDENTIAL_SETTINGS = ("access_key", "secret_key")


def parse_byte_size(value: int | str, setting: str = "value") -> int:
    """
    Parse a byte size such as "5mb", "1gb" or 1048576.

    Units are binary (1kb = 1024 bytes). A bare number means bytes.

    Raises:
        RepositorySettingsError: If the value is not a size
    """
    if isinstance(value, bool):
        raise RepositorySettingsError(f"Invalid byte size for [{setting}]: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise RepositorySettingsError(f"Invalid byte size for [{setting}]: {value!r}")
        return value

    match = re.fullmatch(r"\s*(\d+(?:\.\d+)?)\s*([a-zA-Z]*)\s*", str(value))
    if not match:
        raise RepositorySettingsError(f"Invalid byte size for [{setting}]: {value!r}")
    unit = match.group(2).lower() or "b"
    if unit not in _BYTE_UNITS:
        raise RepositorySettingsError(
            f"Unknown byte size unit for [{setting}]: {value!r}",
            details={"units": sorted(_BYTE_UNITS)},
        )
    return int(float(match.group(1)) * _BYTE_UNITS[unit])


def parse_time_value(value: int | float | str, setting: str = "value") -> float:
    """
    Parse a duration such as "3m", "500ms" or "30s" into seconds.

    Raises:
        RepositorySettingsError: If the value is not a duration
    """
    if isinstance(value, bool):
        raise RepositorySettingsError(f"Invalid time value for [{setting}]: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)

    match = re.fullmatch(r"\s*(-?\d+(?:\.\d+)?)\s*([a-zA-Z]+)\s*", str(value))
    if not match or match.group(2).lower() not in _TIME_UNITS:
        raise RepositorySettingsError(
            f"Invalid time value for [{setting}]: {value!r}",
            details={"units": sorted(_TIME_UNITS)},
        )
    return float(match.group(1)) * _TIME_UNITS[match.group(2).lower()]


def _parse_bool(value: Any, setting: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise RepositorySettingsError(
        f"Failed to parse value [{value}] as only [true] or [false] are allowed for [{setting}]"
    )


def validate_bucket_name(bucket: str) -> bool:
    """
    Validate an S3 bucket name.

    Rules:
    - 3-63 characters
    - Lowercase letters, numbers, hyphens and periods
    - Must start and end with letter or number
    - No consecutive periods
    - Not formatted as IP address
    """
    if not bucket or len(bucket) < 3 or len(bucket) > 63:
        return False

    if not re.match(r"^[a-z0-9][a-z0-9.-]*[a-z0-9]$", bucket):
        return False

    if ".." in bucket:
        return False

    if re.match(r"^\d+\.\d+\.\d+\.\d+$", bucket):
        return False

    return True


def _format_bytes(size: int) -> str:
    for unit, factor in (("tb", TB), ("gb", GB), ("mb", MB), ("kb", KB)):
        if size >= factor and size % factor == 0:
            return f"{size // factor}{unit}"
    return f"{size}b"


@dataclass(frozen=True)
class S3RepositorySettings:
    """
    Immutable, validated settings for one S3 snapshot repository.

    Sizes are stored in bytes and the cooldown period in seconds.
    """

    # Repository name, used in error messages
    name: str

    # Bucket holding the repository data
    bucket: str

    # Path inside the bucket (empty: bucket root)
    base_path: str = ""

    # Named client configuration to connect with
    client: str = "default"

    # Encrypt objects on the server side with AES256
    server_side_encryption: bool = False

    # Chunks above this size are uploaded with the multipart API
    buffer_size: int = DEFAULT_BUFFER_SIZE

    # Big files are split into chunks of this size
    chunk_size: int = DEFAULT_CHUNK_SIZE

    # Storage class for written objects (empty: bucket default)
    storage_class: str = ""

    # Canned ACL for written objects (empty: private)
    canned_acl: str = ""

    parallel_multipart_upload_enabled: bool = True

    parallel_multipart_upload_minimum_part_size: int = DEFAULT_MULTIPART_UPLOAD_MINIMUM_PART_SIZE

    # Delay after finalizing snapshots in the legacy repository format
    cooldown_period_seconds: float = DEFAULT_COOLDOWN_PERIOD_SECONDS

    def __post_init__(self) -> None:
        """Validate settings after creation."""
        errors: List[str] = []

        if not self.bucket:
            errors.append("No bucket defined for s3 repository")
        elif not validate_bucket_name(self.bucket):
            errors.append(f"Invalid bucket name: {self.bucket}")

        if not self.client:
            errors.append("client must not be empty")

        for setting, size, low, high in (
            ("buffer_size", self.buffer_size, MIN_PART_SIZE_USING_MULTIPART, MAX_PART_SIZE_USING_MULTIPART),
            ("chunk_size", self.chunk_size, MIN_PART_SIZE_USING_MULTIPART, MAX_FILE_SIZE_USING_MULTIPART),
            (
                "parallel_multipart_upload.minimum_part_size",
                self.parallel_multipart_upload_minimum_part_size,
                MIN_PART_SIZE_USING_MULTIPART,
                MAX_PART_SIZE_USING_MULTIPART,
            ),
        ):
            if size < low:
                errors.append(
                    f"failed to parse value [{_format_bytes(size)}] for setting [{setting}], "
                    f"must be >= [{_format_bytes(low)}]"
                )
            elif size > high:
                errors.append(
                    f"failed to parse value [{_format_bytes(size)}] for setting [{setting}], "
                    f"must be <= [{_format_bytes(high)}]"
                )

        if self.chunk_size < self.buffer_size:
            errors.append(
                f"chunk_size ({_format_bytes(self.chunk_size)}) can't be lower than "
                f"buffer_size ({_format_bytes(self.buffer_size)})."
            )

        if self.storage_class:
            storage_class = self.storage_class.lower()
            if storage_class in UNSUPPORTED_STORAGE_CLASSES:
                errors.append(f"{storage_class.capitalize()} storage class is not supported")
            elif storage_class not in STORAGE_CLASSES:
                errors.append(f"`{self.storage_class}` is not a valid S3 Storage Class.")

        if self.canned_acl and self.canned_acl.lower() not in CANNED_ACLS:
            errors.append(f"cannedACL is not valid: [{self.canned_acl}]")

        if self.cooldown_period_seconds < 0:
            errors.append(
                f"cooldown_period must be >= 0s, got {self.cooldown_period_seconds}s"
            )

        if errors:
            raise RepositorySettingsError(
                f"[{self.name}] invalid s3 repository settings",
                details={"errors": errors},
            )

    @property
    def blob_path(self) -> str:
        """Normalized base path ("" for the bucket root, otherwise "a/b/")."""
        parts = [p for p in self.base_path.split("/") if p]
        return "/".join(parts) + "/" if parts else ""


def from_settings(name: str, settings: Mapping[str, Any]) -> S3RepositorySettings:
    """
    Build validated repository settings from a raw settings mapping.

    Credentials given directly in repository settings are still accepted by
    the repository but are deprecated; they are reported and otherwise
    ignored here.

    Args:
        name: Repository name
        settings: Raw repository settings

    Returns:
        Validated S3RepositorySettings

    Raises:
        RepositorySettingsError: If any setting is invalid
    """
    logger = structlog.get_logger()

    if any(key in settings for key in _DEPRECATED_CREDENTIAL_SETTINGS):
        logger.warning(
            "s3_repository_deprecated_credentials",
            repository=name,
            message="Using s3 access/secret key from repository settings. Instead store these "
            "in named clients and the keystore for secure settings.",
        )

    repository = S3RepositorySettings(
        name=name,
        bucket=str(settings.get("bucket") or ""),
        base_path=str(settings.get("base_path") or ""),
        client=str(settings.get("client", "default")),
        server_side_encryption=_parse_bool(
            settings.get("server_side_encryption", False), "server_side_encryption"
        ),
        buffer_size=parse_byte_size(settings.get("buffer_size", DEFAULT_BUFFER_SIZE), "buffer_size"),
        chunk_size=parse_byte_size(settings.get("chunk_size", DEFAULT_CHUNK_SIZE), "chunk_size"),
        storage_class=str(settings.get("storage_class") or ""),
        canned_acl=str(settings.get("canned_acl") or ""),
        parallel_multipart_upload_enabled=_parse_bool(
            settings.get("parallel_multipart_upload.enabled", True),
            "parallel_multipart_upload.enabled",
        ),
        parallel_multipart_upload_minimum_part_size=parse_byte_size(
            settings.get(
                "parallel_multipart_upload.minimum_part_size",
                DEFAULT_MULTIPART_UPLOAD_MINIMUM_PART_SIZE,
            ),
            "parallel_multipart_upload.minimum_part_size",
        ),
        cooldown_period_seconds=parse_time_value(
            settings.get("cooldown_period", DEFAULT_COOLDOWN_PERIOD_SECONDS), "cooldown_period"
        ),
    )

    logger.debug(
        "repository_settings_loaded",
        repository=name,
        bucket=repository.bucket,
        chunk_size=_format_bytes(repository.chunk_size),
        buffer_size=_format_bytes(repository.buffer_size),
        server_side_encryption=repository.server_side_encryption,
        canned_acl=repository.canned_acl,
        storage_class=repository.storage_class,
    )
    return repository
