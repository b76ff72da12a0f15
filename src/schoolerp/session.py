"""Bearer-token persistence for the ERP API.

TokenStore saves the token returned by /register/signin to disk, restores it on
subsequent runs and decides when it is too old to trust. This plays the role
local storage plays for the browser front end: requests pick up whatever token
is stored, and go out unauthenticated when there is none.
"""

import json
from datetime import datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from src.schoolerp.errors import AuthenticationError, TransientError
from src.schoolerp.logging import get_logger

if TYPE_CHECKING:
    from src.schoolerp.api import TimetableApi

logger = get_logger(__name__)


class TokenStore:
    """Manages the saved bearer token and its freshness.

    The token file is ``<state_dir>/token.json`` holding ``{"token", "saved_at"}``.
    """

    def __init__(self, state_dir: str = "data/state", max_token_age_hours: int = 24) -> None:
        """Initialize TokenStore.

        Args:
            state_dir: Directory to store the token file.
            max_token_age_hours: Maximum age of a token before it is treated as expired.
        """
        self.state_dir = Path(state_dir)
        self.token_file = self.state_dir / "token.json"
        self.max_token_age_hours = max_token_age_hours

        self.state_dir.mkdir(parents=True, exist_ok=True)

        logger.debug(
            "token_store_initialized",
            token_file=str(self.token_file),
            max_age_hours=max_token_age_hours,
        )

    def _read(self) -> dict | None:
        if not self.token_file.exists():
            return None
        try:
            data = json.loads(self.token_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("token_file_unreadable", path=str(self.token_file), error=str(e))
            return None
        if not isinstance(data, dict) or not data.get("token"):
            logger.warning("token_file_invalid", path=str(self.token_file))
            return None
        return data

    def is_token_valid(self) -> bool:
        """Check if a saved token exists and is still fresh.

        Returns:
            True if the token file exists and is younger than max_token_age_hours.
        """
        data = self._read()
        if data is None:
            logger.debug("token_check", result="missing")
            return False

        try:
            saved_at = datetime.fromisoformat(data["saved_at"])
        except (KeyError, TypeError, ValueError):
            saved_at = datetime.fromtimestamp(self.token_file.stat().st_mtime)

        age = datetime.now() - saved_at
        if age > timedelta(hours=self.max_token_age_hours):
            logger.info(
                "token_check",
                result="expired",
                age_hours=age.total_seconds() / 3600,
                max_hours=self.max_token_age_hours,
            )
            return False

        logger.debug("token_check", result="valid", age_hours=age.total_seconds() / 3600)
        return True

    def load_token(self) -> str | None:
        """Return the saved token, or None if missing or expired."""
        if not self.is_token_valid():
            return None
        data = self._read()
        return data["token"] if data else None

    def save_token(self, token: str) -> None:
        payload = {"token": token, "saved_at": datetime.now().isoformat()}
        self.token_file.write_text(json.dumps(payload), encoding="utf-8")
        logger.info("token_saved", path=str(self.token_file))

    def token_provider(self, override: str | None = None):
        """Build the callable TimetableApi uses to attach the Authorization header.

        Args:
            override: Explicit token (e.g. from ERP_TOKEN) that wins over the file.
        """
        if override:
            return lambda: override
        return self.load_token

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_fixed(2),
        retry=retry_if_exception_type(TransientError),
        reraise=True,
    )
    def authenticate(self, api: "TimetableApi", email: str, password: str) -> str:
        """Log in and persist the returned token.

        Retries on TransientError but fails fast on AuthenticationError.

        Raises:
            AuthenticationError: Wrong credentials or missing login details.
            TransientError: Backend unreachable after all attempts.
        """
        if not email or not password:
            raise AuthenticationError("No ERP credentials configured (ERP_EMAIL / ERP_PASSWORD)")

        logger.info("authentication_started", url=api.base_url, email=email)
        try:
            response = api.login(email, password)
        except AuthenticationError:
            logger.error("authentication_failed", reason="rejected")
            raise
        except TransientError as e:
            logger.warning("authentication_transient_error", error=str(e))
            raise

        self.save_token(response.token)
        logger.info("authentication_succeeded")
        return response.token

    def clear_token(self) -> None:
        """Delete the saved token file."""
        if self.token_file.exists():
            self.token_file.unlink()
            logger.info("token_cleared", path=str(self.token_file))
        else:
            logger.debug("token_clear_skipped", reason="file_not_found")
