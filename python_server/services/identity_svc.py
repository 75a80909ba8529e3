from typing import Optional

from models.schemas import UserProfile
from utils.logger import get_logger
from utils.security import SIGNED_OUT_SCOPE, validate_identity_id

logger = get_logger("identity")

USER_KEY = "user"
ANONYMOUS = SIGNED_OUT_SCOPE


class IdentityService:
    """
    Holds the signed-in profile. The client completes the third-party sign-in
    and posts the resulting profile; no token verification happens here.
    """

    def __init__(self, store):
        self.store = store
        self._current: Optional[UserProfile] = None
        stored = store.get_json(USER_KEY)
        if stored:
            try:
                self._current = UserProfile.model_validate(stored)
                validate_identity_id(self._current.id)
            except ValueError as e:
                logger.warning(f"Discarding stored identity: {e}")
                self._current = None

    def current(self) -> Optional[UserProfile]:
        return self._current

    def scope(self) -> str:
        """Storage scope of the active identity."""
        return self._current.id if self._current else ANONYMOUS

    def sign_in(self, profile: UserProfile) -> UserProfile:
        validate_identity_id(profile.id)
        self.store.set_json(USER_KEY, profile.model_dump())
        self._current = profile
        logger.info(f"Signed in: {profile.id}")
        return profile

    def sign_out(self):
        if self._current:
            logger.info(f"Signed out: {self._current.id}")
        self.store.remove(USER_KEY)
        self._current = None
