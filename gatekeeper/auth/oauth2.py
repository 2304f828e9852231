"""
OAuth2 authentication provider for gatekeeper.

Drives the authorization code flow: the first request redirects the user
agent to the authorization server with a random state nonce kept in the
session; the callback request verifies the state, exchanges the code for an
access token and hands a Login object to the user providers.
"""

import logging
import secrets
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlencode

import aiohttp

from ..errors import ConfigurationError, HttpError, OAuth2Error, OAuth2Redirect, TokenError
from ..role import normalize_role_names
from .session import SessionStore
from .types import Login

logger = logging.getLogger(__name__)


SESSION_TOKEN_KEY = "oauth_token"
SESSION_STATE_KEY = "oauth_state"

EXIT_TRIGGER_REDIRECT = "redirect"
EXIT_TRIGGER_EXCEPTION = "exception"


@dataclass
class OAuth2Config:
    """OAuth2 server configuration."""
    authorization_endpoint: str
    token_endpoint: str
    client_id: str
    client_secret: str
    redirect_uri: Optional[str] = None
    scopes: List[str] = field(default_factory=list)
    response_type: str = "code"
    timeout: float = 10.0


class OAuth2Client:
    """Talks to a single OAuth2 authorization server."""

    def __init__(self, config: OAuth2Config):
        self.config = config

    def get_authorization_url(self, state: str) -> str:
        """Get authorization URL for the user to visit."""
        params = {
            'response_type': self.config.response_type,
            'client_id': self.config.client_id,
            'scope': ' '.join(self.config.scopes),
            'state': state
        }

        if self.config.redirect_uri:
            params['redirect_uri'] = self.config.redirect_uri

        return f"{self.config.authorization_endpoint}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> Dict[str, Any]:
        """
        Exchange an authorization code for an access token.

        Returns:
            The token response. OAuth2 error responses (4xx) are returned as
            they are, carrying an ``error`` key.

        Raises:
            HttpError: If the server cannot be reached or fails.
            TokenError: If a successful response holds no access token.
        """
        payload = {
            'grant_type': 'authorization_code',
            'code': code,
            'client_id': self.config.client_id,
            'client_secret': self.config.client_secret
        }
        if self.config.redirect_uri:
            payload['redirect_uri'] = self.config.redirect_uri

        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as http:
                async with http.post(self.config.token_endpoint, data=payload,
                                     headers={'Accept': 'application/json'}) as resp:
                    if resp.status >= 500:
                        raise HttpError(
                            f"Token endpoint returned HTTP {resp.status}",
                            status=resp.status
                        )
                    body = await resp.json(content_type=None)
        except (aiohttp.ClientError, ValueError) as e:
            logger.error(f"OAuth2 token exchange failed: {e}")
            raise HttpError(f"OAuth2 token exchange failed: {e}", cause=e) from e

        if not isinstance(body, dict):
            raise HttpError("Token endpoint returned an unexpected response")
        if resp.status >= 400:
            body.setdefault('error', f"http_{resp.status}")
        elif 'error' not in body and 'access_token' not in body:
            raise TokenError("Token endpoint response carries no access_token")

        logger.info(f"Exchanged OAuth2 authorization code at {self.config.token_endpoint}")
        return body


class OAuth2Provider:
    """
    OAuth2 authentication provider.

    The exit trigger controls what happens when the user agent must be sent
    to the authorization server: "redirect" returns a Login carrying the
    redirect URL, "exception" raises OAuth2Redirect.
    """

    def __init__(self, client: OAuth2Client, session: SessionStore, roles: Any = None,
                 exit_trigger: str = EXIT_TRIGGER_REDIRECT):
        """
        Args:
            client: Client for the OAuth2 server
            session: Store for the state nonce and access token
            roles: Roles given to users authenticated by this provider

        Raises:
            OAuth2Error: If the roles or exit trigger are invalid.
        """
        self.client = client
        self.session = session
        try:
            self.roles = normalize_role_names(roles, config_key="oauth2_roles")
        except ConfigurationError as e:
            raise OAuth2Error(e.message, cause=e) from e
        self._exit_trigger = EXIT_TRIGGER_REDIRECT
        self.set_exit_trigger(exit_trigger)

    @property
    def exit_trigger(self) -> str:
        return self._exit_trigger

    def set_exit_trigger(self, trigger: str) -> None:
        """
        Set how the provider ends the request when redirecting.

        Raises:
            OAuth2Error: If the trigger is not "redirect" or "exception".
        """
        if trigger not in (EXIT_TRIGGER_REDIRECT, EXIT_TRIGGER_EXCEPTION):
            raise OAuth2Error(f'Invalid exit trigger "{trigger}".')
        self._exit_trigger = trigger

    async def get_login_object(self, query: Mapping[str, str]) -> Optional[Login]:
        """
        Build a Login from the current request's query parameters.

        Returns:
            A Login with the ``oauth2_token`` and ``oauth2_roles`` attributes,
            a Login with ``redirect_url`` set when the user agent must visit
            the authorization server, or None if the server refused the code.

        Raises:
            OAuth2Error: If the state is missing from the session or does not
                match the callback state.
            OAuth2Redirect: When redirecting with the "exception" trigger.
        """
        code = query.get('code')
        if not code:
            await self.session.delete(SESSION_TOKEN_KEY)

            # state param makes the request more secure
            state = self._create_state()
            await self.session.save(SESSION_STATE_KEY, state)

            url = self.client.get_authorization_url(state)
            logger.info("Redirecting to OAuth2 authorization server")
            return self._trigger_exit(url)

        expected_state = await self.session.get(SESSION_STATE_KEY)
        state = query.get('state') or ''
        if not expected_state or not secrets.compare_digest(
                state.encode('utf-8'), str(expected_state).encode('utf-8')):
            logger.warning("OAuth2 state parameter mismatch")
            raise OAuth2Error(
                "The state parameter from OAuth2 response doesn't match the users state parameter."
            )

        # the nonce is single use
        await self.session.delete(SESSION_STATE_KEY)

        access_token = await self.session.get(SESSION_TOKEN_KEY)
        if not access_token:
            access_token = await self.client.exchange_code(code)
            await self.session.save(SESSION_TOKEN_KEY, access_token)

        if isinstance(access_token, dict) and 'error' in access_token:
            logger.warning(f"OAuth2 server refused the authorization code: {access_token['error']}")
            await self.session.delete(SESSION_TOKEN_KEY)
            return None

        login = Login()
        login.set_attribute('oauth2_token', access_token)
        login.set_attribute('oauth2_roles', list(self.roles))
        return login

    def _trigger_exit(self, url: str) -> Login:
        if self._exit_trigger == EXIT_TRIGGER_EXCEPTION:
            raise OAuth2Redirect(url)
        return Login(redirect_url=url)

    @staticmethod
    def _create_state() -> str:
        return f"wf-{secrets.token_hex(8)}"
