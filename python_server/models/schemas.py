from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class GeneratedFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str = Field(..., min_length=1)
    content: str


class Message(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class SavedExtension(BaseModel):
    """A saved project: one conversation paired with the files it produced."""
    id: str
    name: str
    description: str
    saved_at: str
    files: List[GeneratedFile]
    messages: List[Message]


class ExtensionTemplate(BaseModel):
    id: str
    title: str
    description: str
    initial_prompt: str
    icon: str
    files: List[GeneratedFile] = []


class UserProfile(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    email: str = ""
    picture: str = ""


# ---- Request bodies ----

class SendMessageRequest(BaseModel):
    message: str
    new_session: bool = False


class SelectFileRequest(BaseModel):
    filename: str


class SaveProjectRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class ApiKeyRequest(BaseModel):
    api_key: str = ""
