"""Authentication session state."""

import logging
from typing import Optional

from .fastfood_client import FastFoodClient
from .models import AuthState, User
from .store import Store

logger = logging.getLogger(__name__)


class AuthStore(Store[AuthState]):
    """Tracks who is signed in. The only writer of the auth state."""

    def __init__(self, client: FastFoodClient, debug: bool = False) -> None:
        """
        Initialize the auth store in the unauthenticated state.

        Args:
            client: Store client used for account lookups and sign out
            debug: Development mode; failures are logged with details
        """
        super().__init__()
        self.client = client
        self.debug = debug
        self._state = AuthState()

    def get_state(self) -> AuthState:
        return self._state.model_copy()

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def user(self) -> Optional[User]:
        return self._state.user

    def _set(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)
        self._notify()

    async def fetch_authenticated_user(self) -> Optional[User]:
        """Look up the current account and update the state from the result."""
        self._set(is_loading=True)

        try:
            user = await self.client.get_current_user()
            if user:
                self._set(is_authenticated=True, user=user)
            else:
                self._set(is_authenticated=False, user=None)
            return user
        except Exception as e:
            if self.debug:
                logger.error(f"fetch_authenticated_user error details: {e!r}")
            self._set(is_authenticated=False, user=None)
            return None
        finally:
            self._set(is_loading=False)

    async def logout(self) -> None:
        """End the remote session if possible; local state is always cleared."""
        try:
            await self.client.sign_out()
        except Exception as e:
            if self.debug:
                logger.error(f"logout error details: {e!r}")
            else:
                logger.info("Remote sign out failed, clearing local session anyway")
        finally:
            self._set(is_authenticated=False, user=None)
