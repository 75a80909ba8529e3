import os

from services.errors import CredentialMissingError
from utils.logger import get_logger
from utils.security import mask_secret

logger = get_logger("credentials")

USER_KEY = "geminiApiKey"
AMBIENT_ENV_VARS = ("GEMINI_API_KEY", "API_KEY")
MISSING_KEY_MSG = "No Gemini API key is configured. Add your key in Settings."


class CredentialService:
    """A user-supplied key takes precedence over the ambient default."""

    def __init__(self, store, config_default: str = None, environ=None):
        self.store = store
        self.config_default = config_default
        self.environ = os.environ if environ is None else environ
        # Read once at startup, write-through afterwards
        self._user_key = (store.get(USER_KEY) or "").strip()

    def default_key(self) -> str:
        for name in AMBIENT_ENV_VARS:
            value = (self.environ.get(name) or "").strip()
            if value:
                return value
        return (self.config_default or "").strip()

    def resolve(self) -> str:
        key = self._user_key or self.default_key()
        if not key:
            raise CredentialMissingError(MISSING_KEY_MSG)
        return key

    def set_user_key(self, api_key: str):
        api_key = (api_key or "").strip()
        if api_key:
            self.store.set(USER_KEY, api_key)
            logger.info("User API key saved")
        else:
            self.store.remove(USER_KEY)
            logger.info("User API key cleared, falling back to default key")
        self._user_key = api_key

    def describe(self) -> dict:
        active = self._user_key or self.default_key()
        return {
            "has_user_key": bool(self._user_key),
            "has_default_key": bool(self.default_key()),
            "masked": mask_secret(active),
        }
