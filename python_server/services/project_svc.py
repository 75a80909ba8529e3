import time
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from pydantic import ValidationError

from models.schemas import GeneratedFile, Message, SavedExtension
from services.manifest_svc import extract_name
from utils.logger import get_logger
from utils.security import validate_identity_id

logger = get_logger("projects")

KEY_PREFIX = "savedExtensions"
DEFAULT_DESCRIPTION = "An AI-generated Chrome extension."


class ProjectService:
    """Saved projects, one JSON list per identity in the key-value store."""

    def __init__(self, store):
        self.store = store

    def _key(self, identity: str) -> str:
        return f"{KEY_PREFIX}:{validate_identity_id(identity, allow_signed_out=True)}"

    def _load(self, identity: str) -> List[SavedExtension]:
        raw = self.store.get_json(self._key(identity), default=[])
        if not isinstance(raw, list):
            logger.warning(f"Saved projects for '{identity}' are not a list, ignoring")
            return []
        projects = []
        for item in raw:
            try:
                projects.append(SavedExtension.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed saved project for '{identity}': {e.error_count()} errors")
        return projects

    def _store(self, identity: str, projects: List[SavedExtension]):
        self.store.set_json(self._key(identity), [p.model_dump() for p in projects])

    def list_projects(self, identity: str) -> List[SavedExtension]:
        return self._load(identity)

    def get_project(self, identity: str, project_id: str) -> Optional[SavedExtension]:
        return next((p for p in self._load(identity) if p.id == project_id), None)

    def save_project(
        self,
        identity: str,
        files: Sequence[GeneratedFile],
        messages: Sequence[Message],
        name: str = None,
        description: str = None,
    ) -> SavedExtension:
        files = list(files)
        if not files:
            raise ValueError("There are no files to save yet.")

        name = (name or "").strip() or extract_name(files)
        if not (description or "").strip():
            first_user = next((m for m in messages if m.role == "user"), None)
            description = first_user.content if first_user else DEFAULT_DESCRIPTION

        projects = self._load(identity)
        taken = {p.id for p in projects}
        stamp = int(time.time() * 1000)
        while str(stamp) in taken:
            stamp += 1

        project = SavedExtension(
            id=str(stamp),
            name=name,
            description=description,
            saved_at=datetime.now(timezone.utc).isoformat(),
            files=files,
            messages=list(messages),
        )
        projects.append(project)
        self._store(identity, projects)
        logger.info(f"Saved project '{name}' ({project.id}) for {identity}, {len(files)} files")
        return project

    def delete_project(self, identity: str, project_id: str) -> bool:
        projects = self._load(identity)
        remaining = [p for p in projects if p.id != project_id]
        if len(remaining) == len(projects):
            return False
        self._store(identity, remaining)
        logger.info(f"Deleted project {project_id} for {identity}")
        return True
