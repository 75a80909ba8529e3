import os
import re

_SLUG_RE = re.compile(r'^[A-Za-z0-9][A-Za-z0-9_\-]{0,63}$')
_IDENTITY_RE = re.compile(r'^[\w.@+\-]{1,128}$', re.UNICODE)

SIGNED_OUT_SCOPE = "anonymous"


def validate_file_path(file_path: str) -> str:
    """Validate a relative file path (template files, archive entries) and return it normalized."""
    if not file_path or not isinstance(file_path, str):
        raise ValueError("File path must not be empty")

    if "\x00" in file_path:
        raise ValueError(f"File path contains a NUL byte: {file_path!r}")

    normalized = os.path.normpath(file_path).replace("\\", "/")

    if os.path.isabs(normalized) or normalized.startswith("/"):
        raise ValueError(f"Absolute paths are not accepted: {file_path}")

    # Still starting with .. after normpath means it escapes the base dir
    if normalized == ".." or normalized.startswith("../"):
        raise ValueError(f"Path traversal detected: {file_path}")

    return normalized


def validate_slug(value: str, what: str = "id") -> str:
    """Template ids and similar directory-backed names."""
    if not value or not isinstance(value, str):
        raise ValueError(f"{what} must not be empty")
    if not _SLUG_RE.match(value):
        raise ValueError(f"{what} contains illegal characters: {value}")
    return value


def validate_identity_id(identity_id: str, allow_signed_out: bool = False) -> str:
    """
    Identity ids become part of storage keys, so keep them to a safe alphabet.
    SIGNED_OUT_SCOPE is reserved for signed-out use and is only accepted when
    allow_signed_out is set.
    """
    if not identity_id or not isinstance(identity_id, str):
        raise ValueError("Identity id must not be empty")
    if not _IDENTITY_RE.match(identity_id):
        raise ValueError(f"Identity id contains illegal characters: {identity_id}")
    if identity_id.lower() == SIGNED_OUT_SCOPE and not (allow_signed_out and identity_id == SIGNED_OUT_SCOPE):
        raise ValueError(f"Identity id is reserved: {identity_id}")
    return identity_id


def mask_secret(secret: str) -> str:
    """Show only the last four characters of a credential."""
    if not secret:
        return ""
    if len(secret) <= 4:
        return "*" * len(secret)
    return "*" * (len(secret) - 4) + secret[-4:]
