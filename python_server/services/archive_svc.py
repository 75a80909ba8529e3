import io
import zipfile
from typing import Dict, Iterable

from models.schemas import GeneratedFile
from utils.security import validate_file_path

ARCHIVE_NAME = "ai-generated-extension.zip"


def build_archive(files: Iterable[GeneratedFile]) -> bytes:
    """
    Zip every file under its normalized filename, content encoded as UTF-8.
    Absolute or escaping names raise ValueError; names that normalize to the
    same entry keep the last content.
    """
    entries: Dict[str, str] = {}
    for f in files:
        try:
            name = validate_file_path(f.filename)
        except ValueError as e:
            raise ValueError(f"Cannot archive file '{f.filename}': {e}") from e
        entries[name] = f.content
    if not entries:
        raise ValueError("There are no files to download yet.")

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, content in entries.items():
            zf.writestr(name, content.encode("utf-8"))
    return buf.getvalue()
