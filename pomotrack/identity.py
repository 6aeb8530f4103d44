import logging
from collections.abc import Callable

from pomotrack.contracts import AuthCallback

logger = logging.getLogger(__name__)


class LocalIdentity:
    """Identity provider for a single local user, signed in by name."""

    def __init__(self, user_id: str | None = None) -> None:
        self.user_id = user_id or None
        self._callbacks: list[AuthCallback] = []

    def on_auth_change(self, callback: AuthCallback) -> Callable[[], None]:
        self._callbacks.append(callback)
        callback(self.user_id)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def sign_in(self, user_id: str) -> None:
        if not user_id.strip():
            raise ValueError("user_id cannot be blank")
        self.user_id = user_id.strip()
        logger.info("Signed in as %s", self.user_id)
        self._emit()

    def sign_out(self) -> None:
        self.user_id = None
        logger.info("Signed out")
        self._emit()

    def _emit(self) -> None:
        for callback in list(self._callbacks):
            callback(self.user_id)
