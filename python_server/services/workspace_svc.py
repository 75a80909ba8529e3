from typing import Callable, Iterable, List, Optional

from models.schemas import ExtensionTemplate, GeneratedFile, Message, SavedExtension
from services.errors import GenerationBusyError, GenerationError
from services.file_set import FileSelection, FileSet
from utils.logger import get_logger

logger = get_logger("workspace")

GREETING = (
    "Hello! I'm here to help you build a Chrome extension. What would you like to create? "
    "You can describe it, or start with a template."
)
ACKNOWLEDGEMENT = "Here are the updated files for your extension."
ERROR_REPLY = "I encountered an error: {error}"
TEMPLATE_REPLY = (
    'I\'ve loaded the "{title}" template for you. You can see the files and a live preview. '
    "What would you like to change?"
)


def initial_messages() -> List[Message]:
    return [Message(role="assistant", content=GREETING)]


class Workspace:
    """
    The builder's working state: conversation, current file set and file
    selection. Mutated only through the methods below; each mutation notifies
    subscribers so derived views (preview, permissions) can recompute.
    """

    def __init__(self):
        self.messages: List[Message] = initial_messages()
        self.files = FileSet()
        self.selection = FileSelection()
        self.busy = False
        self.last_error: Optional[str] = None
        self.revision = 0
        self._subscribers: List[Callable] = []

    # ---- publish/subscribe ----

    def subscribe(self, callback: Callable):
        self._subscribers.append(callback)

    def _publish(self, files_changed: bool):
        if files_changed:
            self.revision += 1
            self.selection.revalidate(self.files)
        for callback in list(self._subscribers):
            callback(self)

    # ---- whole-state replacement ----

    def _ensure_idle(self):
        if self.busy:
            raise GenerationBusyError("A generation is in progress. Wait for it to finish before switching projects.")

    def start_new_session(self, messages: Iterable[Message] = None, files: Iterable[GeneratedFile] = ()):
        self._ensure_idle()
        self.messages = list(messages) if messages is not None else initial_messages()
        self.files.replace(files)
        self.last_error = None
        self._publish(files_changed=True)

    def apply_template(self, template: ExtensionTemplate):
        messages = initial_messages() + [
            Message(role="user", content=template.initial_prompt),
            Message(role="assistant", content=TEMPLATE_REPLY.format(title=template.title)),
        ]
        self.start_new_session(messages, template.files)
        logger.info(f"Template loaded: {template.id} ({len(template.files)} files)")

    def restore(self, project: SavedExtension):
        self.start_new_session(project.messages, project.files)
        logger.info(f"Project restored: {project.id} '{project.name}'")

    def select_file(self, filename: str) -> bool:
        return self.selection.select(self.files, filename)

    # ---- generation round ----

    async def send_message(self, text: str, adapter_factory: Callable, new_session: bool = False) -> List[GeneratedFile]:
        """
        Run one generation round. adapter_factory() must return an object with
        an async generate_files(messages); it is called inside the round so a
        missing credential fails the round like any other generation error.
        """
        if self.busy:
            raise GenerationBusyError("A generation is already in progress. Please wait for it to finish.")
        if not text or not text.strip():
            raise ValueError("Message must not be empty")

        self.busy = True
        try:
            if new_session:
                self.messages = initial_messages()
                self.files.replace([])
                self.last_error = None
                self._publish(files_changed=True)

            self.messages.append(Message(role="user", content=text))
            self.last_error = None
            self._publish(files_changed=False)
            history = list(self.messages)

            try:
                adapter = adapter_factory()
                files = await adapter.generate_files(history)
            except GenerationError as e:
                self._fail(str(e))
                raise
            except Exception as e:
                logger.exception("Unexpected error during generation")
                self._fail(str(e) or "An unknown error occurred.")
                raise GenerationError(str(e) or "An unknown error occurred.") from e

            if not files:
                message = "The AI did not return any files. Please try rephrasing your request."
                self._fail(message)
                raise GenerationError(message)

            self.files.replace(files)
            self.messages.append(Message(role="assistant", content=ACKNOWLEDGEMENT))
            self._publish(files_changed=True)
            logger.info(f"Generation round complete: {len(self.files)} files")
            return self.files.to_list()
        finally:
            self.busy = False

    def _fail(self, error: str):
        self.last_error = error
        self.messages.append(Message(role="assistant", content=ERROR_REPLY.format(error=error)))
        self._publish(files_changed=False)
        logger.warning(f"Generation round failed: {error}")
