import json
import os
from typing import Any, Dict, List

from models.schemas import ExtensionTemplate, GeneratedFile
from services.errors import TemplateNotFoundError
from utils.logger import get_logger
from utils.security import validate_file_path, validate_slug

logger = get_logger("templates")

# Catalog order on the home page
TEMPLATE_ORDER = ["floating-timer", "dark-mode", "note-taker", "color-picker", "pomodoro-timer"]


class TemplateService:
    """
    Starter templates on disk:
      templates/<id>/template.json   title, description, initial_prompt, icon, files
      templates/<id>/files/<name>    file contents
    """

    def __init__(self, server_root: str):
        self.server_root = server_root
        self.templates_dir = os.path.join(server_root, "templates")

    def _read_meta(self, template_id: str) -> Dict[str, Any]:
        meta_path = os.path.join(self.templates_dir, template_id, "template.json")
        with open(meta_path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _sort_key(self, template_id: str):
        if template_id in TEMPLATE_ORDER:
            return (0, TEMPLATE_ORDER.index(template_id), template_id)
        return (1, 0, template_id)

    def list_templates(self) -> List[ExtensionTemplate]:
        """Metadata only; files are loaded on demand."""
        templates = []
        if not os.path.isdir(self.templates_dir):
            return templates

        for item in sorted(os.listdir(self.templates_dir), key=self._sort_key):
            if not os.path.exists(os.path.join(self.templates_dir, item, "template.json")):
                continue
            try:
                meta = self._read_meta(item)
                templates.append(ExtensionTemplate(
                    id=item,
                    title=meta["title"],
                    description=meta.get("description", ""),
                    initial_prompt=meta["initial_prompt"],
                    icon=meta.get("icon", ""),
                ))
            except (OSError, ValueError, KeyError) as e:
                logger.error(f"Failed to load template manifest for {item}: {e}")
        return templates

    def get_template(self, template_id: str) -> ExtensionTemplate:
        try:
            validate_slug(template_id, "Template id")
        except ValueError as e:
            raise TemplateNotFoundError(str(e)) from e

        template_path = os.path.join(self.templates_dir, template_id)
        if not os.path.exists(os.path.join(template_path, "template.json")):
            raise TemplateNotFoundError(f"Template '{template_id}' not found.")

        meta = self._read_meta(template_id)
        files = []
        for name in meta.get("files", []):
            rel = validate_file_path(name)
            with open(os.path.join(template_path, "files", rel), "r", encoding="utf-8") as f:
                files.append(GeneratedFile(filename=name, content=f.read()))

        return ExtensionTemplate(
            id=template_id,
            title=meta["title"],
            description=meta.get("description", ""),
            initial_prompt=meta["initial_prompt"],
            icon=meta.get("icon", ""),
            files=files,
        )
