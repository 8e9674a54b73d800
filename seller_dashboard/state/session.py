"""
Session State Management
Who is logged in, and which of several accounts is active.

States:
    Uninitialized
        └── initialize() ──> Initialized
                               ├── LoggedOut
                               └── LoggedIn(active_account)

    login        LoggedOut -> LoggedIn, or LoggedIn -> LoggedIn (new active)
    logout       LoggedIn  -> LoggedOut, account stays in the list
    logout_all   any       -> LoggedOut, list cleared
    switch       LoggedIn  -> LoggedIn, then full application reload

The manager is the only writer of session state and of the persisted
record. Switching accounts reloads the whole consuming application
instead of propagating the new identity through every data hook: per-hook
caches filled under two identities are worse than a full rebuild.
"""

import logging
from typing import Callable, Dict, List, Optional, Any

from ..db import AccountStore
from ..errors import AuthError, ValidationError
from ..models import Account, identity_from_login

logger = logging.getLogger(__name__)

# (credential, password) -> {"token": ..., "user": {...}?}
Authenticator = Callable[[str, str], Dict[str, Any]]


def _no_reload() -> None:
    logger.debug("No reload callback configured")


class SessionManager:
    """
    Centralized session management.

    Usage:
        manager = SessionManager(store, client.login, reload=st.rerun)
        manager.initialize()

        manager.login("shop@example.com", "secret")
        manager.active_account
        manager.switch_account(other.id)
    """

    def __init__(
        self,
        store: AccountStore,
        authenticate: Authenticator,
        reload: Optional[Callable[[], None]] = None,
    ):
        self.store = store
        self._authenticate = authenticate
        self._reload = reload or _no_reload
        self._accounts: List[Account] = []
        self._active: Optional[Account] = None
        self._initialized = False
        self._loading = False

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def initialize(self) -> None:
        """Read the persisted record. Runs once; never raises."""
        if self._initialized:
            return

        accounts, active_id = self.store.load()
        self._accounts = accounts

        if active_id:
            active = self._find(active_id)
            if active is not None:
                self._active = active
                self.store.set_active(active.id, active.token)
                logger.info("Restored active account %s", active.id)
            else:
                logger.info("Active account %s not among saved accounts", active_id)

        self._initialized = True
        logger.debug("Session initialized with %d account(s)", len(accounts))

    def teardown(self) -> None:
        """Drop in-memory state. Storage is left untouched."""
        self._accounts = []
        self._active = None
        self._initialized = False
        self._loading = False

    # =========================================================================
    # Property Accessors
    # =========================================================================

    @property
    def accounts(self) -> List[Account]:
        return list(self._accounts)

    @property
    def active_account(self) -> Optional[Account]:
        return self._active

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def is_authenticated(self) -> bool:
        return self._active is not None

    @property
    def is_loading(self) -> bool:
        return self._loading

    # =========================================================================
    # Transitions
    # =========================================================================

    def login(self, credential: str, password: str) -> Account:
        """
        Authenticate and make the resulting account active.

        An existing account with the same email is replaced in place, so
        repeated logins never grow the list. Raises AuthError when the
        backend rejects the credentials or returns no token.
        """
        self._require_initialized()
        credential = (credential or "").strip()
        if not credential or not password:
            raise ValidationError("Email and password are required")

        self._loading = True
        try:
            response = self._authenticate(credential, password)
            if not isinstance(response, dict):
                response = {}
            token = response.get("token")
            if not isinstance(token, str) or not token:
                raise AuthError("No token received from the server")

            identity = identity_from_login(credential, response.get("user"))
            account = Account.create(token, identity)

            emails = {credential, identity.email}
            index = self._index_by_email(emails)
            if index is not None:
                # Replace the first match in place and drop any other entry
                # that shares one of the emails
                accounts = [
                    account if i == index else a
                    for i, a in enumerate(self._accounts)
                    if i == index or a.email not in emails
                ]
                logger.info("Replaced account for %s", credential)
            else:
                accounts = self._accounts + [account]
                logger.info("Added account for %s", credential)

            self.store.save(accounts)
            self.store.set_active(account.id, account.token)

            self._accounts = accounts
            self._active = account
            return account
        except AuthError:
            logger.warning("Login failed for %s", credential)
            raise
        finally:
            self._loading = False

    def logout(self) -> None:
        """Deactivate the current account but keep it for quick switching"""
        self._require_initialized()
        self.store.clear_active()
        if self._active is not None:
            logger.info("Logged out of %s", self._active.id)
        self._active = None

    def logout_all(self) -> None:
        """Forget every account"""
        self._require_initialized()
        self.store.clear_all()
        self._accounts = []
        self._active = None
        logger.info("Logged out of all accounts")

    def switch_account(self, account_id: str) -> None:
        """
        Make another known account active and reload the application.

        Unknown ids are ignored: a stale view may still offer an account
        that has since been removed.
        """
        self._require_initialized()
        account = self._find(account_id)
        if account is None:
            logger.debug("Ignoring switch to unknown account %s", account_id)
            return

        self.store.set_active(account.id, account.token)
        self._active = account
        logger.info("Switched to account %s, reloading", account.id)
        self._reload()

    def add_account(self, account: Account) -> None:
        """Append an account without making it active"""
        self._require_initialized()
        if self._find(account.id) is not None:
            raise ValidationError(f"Account {account.id} already exists")
        accounts = self._accounts + [account]
        self.store.save(accounts)
        self._accounts = accounts

    # =========================================================================
    # Helpers
    # =========================================================================

    def _find(self, account_id: str) -> Optional[Account]:
        return next((a for a in self._accounts if a.id == account_id), None)

    def _index_by_email(self, emails: set) -> Optional[int]:
        for i, account in enumerate(self._accounts):
            if account.email is not None and account.email in emails:
                return i
        return None

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("SessionManager.initialize() has not been called")
