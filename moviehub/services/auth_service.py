from typing import Any
import logging

from moviehub.errors import MovieHubError, RemoteRejected, ValidationFailed
from moviehub.schemas.auth import UserLogin, UserProfile, UserRegister, UserSession
from moviehub.schemas.validation import validate_input
from moviehub.services.api_client import MovieHubAPI
from moviehub.services.session_service import SessionContext

logger = logging.getLogger(__name__)

LOGIN_MESSAGES = {
    400: "Invalid request. Please check your details.",
    401: "Incorrect email or password",
    404: "User not found",
}

REGISTER_MESSAGES = {
    400: "Invalid details. Please check them.",
    409: "This email address is already in use",
}


def _session_from_response(payload: Any) -> UserSession:
    """Build the stored session from a login/register response"""
    if not isinstance(payload, dict):
        raise ValidationFailed("Unexpected response from the server")
    session = UserSession(
        id=payload.get("id"),
        name=payload.get("displayName") or payload.get("name"),
        email=payload.get("email"),
        token=payload.get("token") or payload.get("accessToken"),
    )
    if not session.is_complete:
        raise ValidationFailed("Unexpected response from the server")
    return session


class AuthService:
    """Login, registration and logout; the only writers of the session record"""

    def __init__(self, api: MovieHubAPI, context: SessionContext):
        self._api = api
        self._context = context

    async def login(self, email: str, password: str) -> UserSession:
        credentials = validate_input(UserLogin, email=email, password=password)
        try:
            payload = await self._api.post("/users/login", json=credentials.model_dump())
        except RemoteRejected as e:
            logger.warning(f"Login failed for {credentials.email}: status {e.status_code}")
            raise e.with_message(LOGIN_MESSAGES.get(e.status_code) or e.user_message) from e

        session = _session_from_response(payload)
        await self._context.set_session(session)
        return session

    async def register(self, display_name: str, email: str, password: str, confirm_password: str) -> UserSession:
        user_data = validate_input(
            UserRegister,
            display_name=display_name,
            email=email,
            password=password,
            confirm_password=confirm_password,
        )
        try:
            payload = await self._api.post("/users/register", json=user_data.model_dump(by_alias=True))
        except RemoteRejected as e:
            logger.warning(f"Registration failed for {user_data.email}: status {e.status_code}")
            raise e.with_message(REGISTER_MESSAGES.get(e.status_code) or e.user_message) from e

        session = _session_from_response(payload)
        await self._context.set_session(session)
        return session

    async def logout(self) -> None:
        """Tell the service, then clear local data even if that call failed."""
        try:
            await self._api.post("/users/logout")
        except MovieHubError as e:
            logger.error(f"Logout request failed: {e.message}")
        finally:
            await self._context.clear()

    async def get_user_profile(self, user_id: str) -> UserProfile:
        payload = await self._api.get(f"/users/{user_id}")
        return UserProfile.model_validate(payload)
