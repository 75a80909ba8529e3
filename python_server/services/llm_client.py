import asyncio
import json
from typing import List, Sequence

import google.generativeai as genai
import requests

from models.schemas import GeneratedFile, Message
from services.errors import GenerationError
from utils.logger import get_logger

logger = get_logger("llm_client")

SYSTEM_INSTRUCTION = """You are an expert AI specializing in creating Google Chrome extensions.
Your goal is to help users build a Chrome extension by generating the necessary code based on their descriptions.

- You must always generate a complete, working Chrome extension.
- Strive to create visually appealing (beautiful) and highly functional (powerful) extensions. The UI should be clean, modern, and intuitive.
- You MUST create a separate `style.css` file for all but the most trivial of styling. Link it in your `popup.html`. DO NOT use inline styles.
- When modifying an existing extension, preserve the existing features and UI unless specifically asked to change them.
- Always include a `manifest.json`, a `popup.html`, and a `popup.js`. You can also include other files like content scripts, or background scripts if necessary.
- Do not add comments explaining the code in the code blocks themselves.
- Do not skip any file. You must provide the full code for every file.
- The user's request may be a new request or a modification of a previous one. You will be given the conversation history. You must generate all the files for the extension based on the latest state of the conversation.

Your output MUST be a single JSON object. This object should contain a single key, "files", which is an array of objects. Each object in the array represents a file and must have two keys: "filename" (a string) and "content" (a string with the full file content)."""

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "files": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "filename": {"type": "STRING"},
                    "content": {"type": "STRING"},
                },
                "required": ["filename", "content"],
            },
        }
    },
    "required": ["files"],
}

EMPTY_RESPONSE_MSG = "Received an empty response from the AI. Please try again."
INVALID_FORMAT_MSG = "Invalid JSON format from AI. Expected an object with a 'files' array."
NO_FILES_MSG = "The AI did not return any files. Please try rephrasing your request."
FAILURE_PREFIX = "Failed to generate code. "


def format_conversation(messages: Sequence[Message]) -> str:
    """The whole history goes to the model as 'role: content' blocks."""
    return "\n\n".join(f"{m.role}: {m.content}" for m in messages)


def parse_files_response(text: str) -> List[GeneratedFile]:
    """Turn the model's JSON reply into files; entries without string filename/content are dropped."""
    if not text or not text.strip():
        raise GenerationError(EMPTY_RESPONSE_MSG)
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise GenerationError(INVALID_FORMAT_MSG) from e

    entries = payload.get("files") if isinstance(payload, dict) else None
    if not isinstance(entries, list):
        raise GenerationError(INVALID_FORMAT_MSG)

    files = [
        GeneratedFile(filename=e["filename"], content=e["content"])
        for e in entries
        if isinstance(e, dict)
        and isinstance(e.get("filename"), str) and e["filename"]
        and isinstance(e.get("content"), str)
    ]
    if not files:
        raise GenerationError(NO_FILES_MSG)
    return files


class GeminiClient:
    """Hosted generation through the Gemini API."""

    def __init__(self, api_key: str, model: str = "gemini-2.5-pro"):
        self.api_key = api_key
        self.model = model

    def generate_sync(self, messages: Sequence[Message]) -> List[GeneratedFile]:
        try:
            genai.configure(api_key=self.api_key)
            model = genai.GenerativeModel(
                self.model,
                system_instruction=SYSTEM_INSTRUCTION,
                generation_config=genai.GenerationConfig(
                    response_mime_type="application/json",
                    response_schema=RESPONSE_SCHEMA,
                ),
            )
            response = model.generate_content(format_conversation(messages))
            text = response.text
        except Exception as e:
            logger.error(f"Gemini request failed: {type(e).__name__}: {e}")
            raise GenerationError(f"{FAILURE_PREFIX}{e}") from e

        try:
            return parse_files_response(text)
        except GenerationError as e:
            logger.error(f"Error generating extension code: {e}")
            raise GenerationError(f"{FAILURE_PREFIX}{e}") from e

    async def generate_files(self, messages: Sequence[Message]) -> List[GeneratedFile]:
        # The SDK call blocks; keep the event loop free while it runs
        return await asyncio.to_thread(self.generate_sync, list(messages))


class LocalLLMClient:
    """
    Generation through a local Ollama instance.
    Defaults to http://localhost:11434
    """

    def __init__(self, base_url: str = "http://localhost:11434", model: str = "gpt-oss:20b", timeout: int = 300):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout

    def generate_sync(self, messages: Sequence[Message]) -> List[GeneratedFile]:
        url = f"{self.base_url}/api/generate"
        payload = {
            "model": self.model,
            "prompt": format_conversation(messages),
            "system": SYSTEM_INSTRUCTION,
            "format": "json",
            "stream": False,
        }

        try:
            response = requests.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            text = response.json().get("response", "")
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Could not connect to Ollama at {self.base_url}: {e}")
            raise GenerationError(f"{FAILURE_PREFIX}Could not connect to Ollama at {self.base_url}. Is it running?") from e
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Error calling Ollama: {e}")
            raise GenerationError(f"{FAILURE_PREFIX}{e}") from e

        try:
            return parse_files_response(text)
        except GenerationError as e:
            raise GenerationError(f"{FAILURE_PREFIX}{e}") from e

    async def generate_files(self, messages: Sequence[Message]) -> List[GeneratedFile]:
        return await asyncio.to_thread(self.generate_sync, list(messages))


def build_generation_client(config, credentials):
    """
    Pick the adapter for the configured provider. Gemini needs a credential;
    CredentialMissingError propagates from credentials.resolve().
    """
    gen = config.generation
    if gen.provider == "ollama":
        return LocalLLMClient(gen.ollama_host, gen.ollama_model, gen.ollama_timeout)
    if gen.provider != "gemini":
        raise GenerationError(f"{FAILURE_PREFIX}Unknown generation provider '{gen.provider}'.")
    return GeminiClient(credentials.resolve(), gen.model)
