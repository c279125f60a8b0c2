"""Redirect based login with CSRF protection.

Outbound, ``get_login_url`` stores a fresh state and returns the login dialog
URL. Inbound, ``get_access_token`` checks the callback's code and state and
exchanges the code for a token.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from graphlogin.config import LoginConfig
from graphlogin.models.app import AccessToken, AppCredentials
from graphlogin.models.flow import (
    CALLBACK_PARAMS,
    AuthorizationRequest,
    CallbackParameters,
)
from graphlogin.primitives.random import SecureRandom
from graphlogin.primitives.urls import UrlManipulator, build_query
from graphlogin.services.security import generate_state, validate_state
from graphlogin.services.state import StateStorage, StateStore
from graphlogin.services.tokens import TokenExchangeClient

logger = logging.getLogger(__name__)


class RedirectLoginHelper:
    """Handles one request's worth of the redirect login flow.

    The helper is request scoped: pass in the current request's URL and/or
    query parameters along with the session store for that request.

    Args:
        app: Application credentials
        state_store: Session store holding the CSRF state
        current_url: Full URL of the current request. Used as the redirect
            URL for the exchange when none is given explicitly, and as the
            source of callback parameters when ``query_params`` is omitted.
        query_params: Query parameters of the current request
        config: Endpoint and session settings
        url_manipulator: URL rewriting collaborator
        secure_random: Random generator for the CSRF state
    """

    def __init__(
        self,
        app: AppCredentials,
        state_store: StateStore,
        current_url: str | None = None,
        query_params: Mapping[str, object] | None = None,
        config: LoginConfig | None = None,
        url_manipulator: UrlManipulator | None = None,
        secure_random: SecureRandom | None = None,
    ):
        self.app = app
        self.config = config or LoginConfig()
        self.current_url = current_url
        self.url_manipulator = url_manipulator or UrlManipulator()
        self.secure_random = secure_random or SecureRandom()
        self.state_storage = StateStorage(
            state_store,
            prefix=self.config.session_prefix,
            check_status=self.config.check_session_status,
        )

        if query_params is not None:
            self.callback = CallbackParameters.from_query(query_params)
        elif current_url is not None:
            self.callback = CallbackParameters.from_url(current_url)
        else:
            self.callback = CallbackParameters()

    def get_login_url(
        self,
        redirect_url: str,
        scope: Sequence[str] = (),
        rerequest: bool = False,
        version: str | None = None,
        separator: str = "&",
    ) -> str:
        """Store a fresh CSRF state and return the login dialog URL.

        Args:
            redirect_url: Where the provider sends the user after login
            scope: Permissions to request
            rerequest: Ask again for permissions the user declined before
            version: Graph API version, defaults to the configured one
            separator: Query string separator, some templates need ``;``

        Returns:
            URL to redirect the user to

        Raises:
            StorageUnavailableError: If the state could not be stored
        """
        state = generate_state(self.secure_random)
        self.state_storage.save(state)

        auth_request = AuthorizationRequest(
            dialog_base_url=self.config.dialog_base_url,
            api_version=version or self.config.default_graph_version,
            client_id=self.app.app_id,
            redirect_url=redirect_url,
            state=state,
            sdk=self.config.sdk_tag,
            scope=tuple(scope),
            rerequest=rerequest,
        )

        logger.debug(f"Built login URL for app {self.app.app_id}")
        return auth_request.build_authorization_url(separator)

    def get_logout_url(
        self, access_token: AccessToken | str, next_url: str, separator: str = "&"
    ) -> str:
        """Return the URL that logs the user out of the provider."""
        params = {"next": next_url, "access_token": str(access_token)}
        return f"{self.config.dialog_base_url}/logout.php?" + build_query(
            params, separator
        )

    def get_access_token(
        self, token_client: TokenExchangeClient, redirect_url: str | None = None
    ) -> AccessToken | None:
        """Exchange the callback's code for an access token.

        Returns None when the request is not a valid redirect: there is no
        code, or the state is missing or does not match the stored one.

        Args:
            token_client: Performs the exchange
            redirect_url: Redirect URL used at login time. Defaults to the
                current request URL.

        Raises:
            StorageUnavailableError: If the stored state could not be read
            ValueError: If no redirect URL is available
        """
        if not self.is_valid_redirect():
            return None

        redirect_url = redirect_url or self.current_url
        if redirect_url is None:
            raise ValueError("No redirect URL given and current URL unknown")

        # Must match the login URL's redirect_uri, which had none of these
        redirect_url = self.url_manipulator.remove_params_from_url(
            redirect_url, CALLBACK_PARAMS
        )

        return token_client.exchange_code(self.callback.code, self.app, redirect_url)

    def is_valid_redirect(self) -> bool:
        """Check the callback has a code and a state matching the stored one.

        Raises:
            StorageUnavailableError: If the stored state could not be read
        """
        if self.callback.code is None:
            if self.callback.is_error():
                logger.warning(
                    f"Login callback contained error: {self.callback.error} - "
                    f"{self.callback.error_description}"
                )
            return False

        if self.callback.state is None:
            logger.warning("Login callback missing state parameter")
            return False

        if not validate_state(self.state_storage.load(), self.callback.state):
            logger.warning("Login callback state mismatch - possible CSRF attack")
            return False

        return True

    def disable_session_status_check(self) -> None:
        """Use the state store without checking that it is active."""
        self.state_storage.disable_status_check()

    @property
    def error(self) -> str | None:
        return self.callback.error

    @property
    def error_reason(self) -> str | None:
        return self.callback.error_reason

    @property
    def error_description(self) -> str | None:
        return self.callback.error_description

    @property
    def error_code(self) -> str | None:
        return self.callback.error_code
