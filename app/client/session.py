# app/client/session.py
import logging
import threading
from typing import Callable

import httpx

from app.client.api import APIError, StorefrontAPI
from app.client.cart import CartState

logger = logging.getLogger(__name__)

TOKEN_CHECK_INTERVAL_SECONDS = 10 * 60
EXPIRED_STATUS_CODES = {401, 403}


class TokenValidator:
    """
    Periodically re-validates the session against GET /verify-token.

    Only an explicit 401/403 from the server ends the session. Network
    errors and 5xx answers are logged and ignored, so a flaky connection
    never logs the customer out.

    `is_active` tells the loop whether anyone is logged in; guests are
    never checked. The loop ends on its own once the session expires.
    """

    def __init__(
        self,
        api: StorefrontAPI,
        interval: float = TOKEN_CHECK_INTERVAL_SECONDS,
        is_active: Callable[[], bool] | None = None,
    ):
        self.api = api
        self.interval = interval
        self.expired = False
        self._is_active = is_active or (lambda: True)
        self._listeners: list[Callable[[], None]] = []
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def on_expired(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def check(self) -> bool | None:
        """
        Returns:
            True if the token is valid, False if the server rejected it,
            None if the check could not be completed.
        """
        try:
            self.api.verify_token()
        except APIError as e:
            if e.status_code in EXPIRED_STATUS_CODES:
                self._expire(e.message)
                return False
            logger.warning("Token check failed with %s, keeping session", e.status_code)
            return None
        except httpx.HTTPError as e:
            logger.warning("Token check skipped, network error: %s", e)
            return None

        self.expired = False
        return True

    def _expire(self, reason: str) -> None:
        # listeners fire once per session, not on every rejected check
        if self.expired:
            return
        logger.info("Session expired: %s", reason)
        self.expired = True
        for callback in list(self._listeners):
            try:
                callback()
            except Exception:
                logger.exception("on_expired callback failed")

    # ---- background loop ----

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Begin checking a fresh session. The first check runs right away."""
        if self.running:
            return
        self.expired = False
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="token-validator", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self) -> None:
        while not self._stop.is_set():
            if self._is_active():
                self.check()
            if self.expired:
                break
            if self._stop.wait(self.interval):
                break


class Session:
    """
    Logged-in customer: profile, cookie session and the local cart.
    """

    def __init__(self, api: StorefrontAPI, cart: CartState):
        self.api = api
        self.cart = cart
        self.user: dict | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def login(self, email: str, password: str) -> dict:
        self.user = self.api.login(email, password)
        return self.user

    def restore(self) -> bool:
        """
        Pick up an existing cookie session (e.g. after a restart).
        """
        try:
            body = self.api.verify_token()
        except (APIError, httpx.HTTPError):
            return False
        self.user = body.get("user")
        return self.user is not None

    def expire(self) -> None:
        """Drop the local session after the server rejected the token."""
        self.user = None
        self.api.client.cookies.clear()

    def logout(self) -> None:
        """
        Server logout is best effort; local state is always cleared.
        """
        try:
            self.api.logout()
        except (APIError, httpx.HTTPError) as e:
            logger.warning("Server logout failed: %s", e)
        self.user = None
        self.api.client.cookies.clear()
        self.cart.empty_cart()
