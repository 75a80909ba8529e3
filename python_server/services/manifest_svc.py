import json
from typing import Any, Iterable, List, Optional

from models.schemas import GeneratedFile
from utils.logger import get_logger

logger = get_logger("manifest")

MANIFEST_FILENAME = "manifest.json"
DEFAULT_EXTENSION_NAME = "My Extension"


def _load_manifest(files: Iterable[GeneratedFile]) -> Optional[Any]:
    """Parsed manifest.json, or None when it is missing or not valid JSON."""
    manifest_file = next((f for f in files if f.filename == MANIFEST_FILENAME), None)
    if manifest_file is None:
        return None
    try:
        return json.loads(manifest_file.content)
    except (json.JSONDecodeError, TypeError) as e:
        # Display aid only; a broken manifest must not break the page
        logger.warning(f"Failed to parse manifest.json: {e}")
        return None


def extract_permissions(files: Iterable[GeneratedFile]) -> List:
    manifest = _load_manifest(files)
    if not isinstance(manifest, dict):
        return []
    permissions = manifest.get("permissions")
    return list(permissions) if isinstance(permissions, list) else []


def extract_name(files: Iterable[GeneratedFile], default: str = DEFAULT_EXTENSION_NAME) -> str:
    """Manifest name, used as the default title when saving a project."""
    manifest = _load_manifest(files)
    if isinstance(manifest, dict):
        name = manifest.get("name")
        if isinstance(name, str) and name.strip():
            return name
    return default
