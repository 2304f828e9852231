"""
Tests for authentication collaborators: users, encoders, session stores and
the OAuth2 provider.
"""

import json
from unittest.mock import AsyncMock
from urllib.parse import parse_qs, urlparse

import pytest
from aiohttp import web
from aiohttp import test_utils

from gatekeeper.auth import (
    EXIT_TRIGGER_EXCEPTION,
    Login,
    MemorySessionStore,
    OAuth2Client,
    OAuth2Config,
    OAuth2Provider,
    PlainEncoder,
    RedisSessionStore,
    Sha256Encoder,
    User,
    create_encoder,
)
from gatekeeper.auth.oauth2 import SESSION_STATE_KEY, SESSION_TOKEN_KEY
from gatekeeper.errors import ConfigurationError, HttpError, OAuth2Error, OAuth2Redirect, TokenError
from gatekeeper.role import Role


def oauth2_config(token_endpoint="https://auth.example.com/token"):
    return OAuth2Config(
        authorization_endpoint="https://auth.example.com/authorize",
        token_endpoint=token_endpoint,
        client_id="client-1",
        client_secret="secret",
        redirect_uri="https://app.example.com/callback",
        scopes=["read", "profile"]
    )


class TestUser:
    """Test user principals"""

    def test_roles_normalized(self):
        user = User("jane", roles="ROLE_ADMIN")

        assert user.get_roles() == [Role("ROLE_ADMIN")]
        assert user.has_role("ROLE_ADMIN")
        assert not user.has_role("ROLE_USER")
        assert user.is_authenticated()
        assert user.kind == "User"

    def test_roles_are_copied(self):
        user = User("jane", roles=["ROLE_ADMIN"])
        user.get_roles().append(Role("ROLE_ROOT"))

        assert user.get_roles() == [Role("ROLE_ADMIN")]

    def test_anonymous(self):
        user = User.anonymous()

        assert not user.is_authenticated()
        assert user.get_roles() == []

    def test_invalid_roles(self):
        with pytest.raises(ConfigurationError):
            User("jane", roles=5)

    def test_to_dict(self):
        user = User("jane", roles=["ROLE_A", "ROLE_B"], attributes={"email": "jane@example.com"})

        assert user.to_dict() == {
            'username': 'jane',
            'roles': ['ROLE_A', 'ROLE_B'],
            'authenticated': True,
            'attributes': {'email': 'jane@example.com'}
        }


class TestEncoders:
    """Test password encoders"""

    def test_sha256_roundtrip(self):
        encoder = Sha256Encoder()
        password_hash = encoder.create_password_hash("hunter2")

        assert password_hash.startswith("sha256$")
        assert encoder.verify_password_hash("hunter2", password_hash)
        assert not encoder.verify_password_hash("hunter3", password_hash)

    def test_sha256_salted(self):
        encoder = Sha256Encoder()

        assert encoder.create_password_hash("pw") != encoder.create_password_hash("pw")

    @pytest.mark.parametrize("password_hash", ["", "nodollars", "md5$salt$digest"])
    def test_sha256_malformed_hash(self, password_hash):
        assert not Sha256Encoder().verify_password_hash("pw", password_hash)

    def test_plain(self):
        encoder = PlainEncoder()

        assert encoder.create_password_hash("pw") == "pw"
        assert encoder.verify_password_hash("pw", "pw")
        assert not encoder.verify_password_hash("pw", "other")

    def test_factory(self):
        assert isinstance(create_encoder("sha256"), Sha256Encoder)
        assert isinstance(create_encoder("plain"), PlainEncoder)
        with pytest.raises(ConfigurationError):
            create_encoder("bcrypt")


class TestSessionStores:
    """Test session stores"""

    @pytest.mark.asyncio
    async def test_memory_store(self):
        store = MemorySessionStore({"a": 1})

        assert await store.get("a") == 1
        assert await store.get("b", "default") == "default"

        await store.save("b", {"x": 1})
        assert await store.get("b") == {"x": 1}

        assert await store.delete("b") is True
        assert await store.delete("b") is False

    @pytest.mark.asyncio
    async def test_redis_store(self):
        client = AsyncMock()
        client.get.return_value = json.dumps({"access_token": "t"})
        client.delete.return_value = 1
        store = RedisSessionStore("s1", client=client)

        await store.save(SESSION_STATE_KEY, "wf-1")
        client.set.assert_awaited_once_with(
            "gatekeeper:session:s1:oauth_state", json.dumps("wf-1"), ex=3600
        )

        assert await store.get(SESSION_TOKEN_KEY) == {"access_token": "t"}
        client.get.assert_awaited_with("gatekeeper:session:s1:oauth_token")

        assert await store.delete(SESSION_TOKEN_KEY) is True

        await store.close()
        client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_redis_store_missing_key(self):
        client = AsyncMock()
        client.get.return_value = None
        client.delete.return_value = 0
        store = RedisSessionStore("s1", client=client)

        assert await store.get("missing", "default") == "default"
        assert await store.delete("missing") is False


class TestOAuth2Client:
    """Test the OAuth2 client"""

    def test_authorization_url(self):
        url = OAuth2Client(oauth2_config()).get_authorization_url("wf-abc")

        parsed = urlparse(url)
        params = parse_qs(parsed.query)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://auth.example.com/authorize"
        assert params == {
            'response_type': ['code'],
            'client_id': ['client-1'],
            'scope': ['read profile'],
            'state': ['wf-abc'],
            'redirect_uri': ['https://app.example.com/callback']
        }

    @staticmethod
    def token_app(status, body):
        async def token(request):
            form = await request.post()
            assert form['grant_type'] == 'authorization_code'
            assert form['code'] == 'abc'
            return web.json_response(body, status=status)

        app = web.Application()
        app.router.add_post('/token', token)
        return app

    @pytest.mark.asyncio
    async def test_exchange_code(self):
        app = self.token_app(200, {"access_token": "t", "token_type": "bearer"})
        async with test_utils.TestServer(app) as server:
            client = OAuth2Client(oauth2_config(str(server.make_url('/token'))))

            token = await client.exchange_code("abc")

        assert token == {"access_token": "t", "token_type": "bearer"}

    @pytest.mark.asyncio
    async def test_exchange_code_refused(self):
        app = self.token_app(400, {"error": "invalid_grant"})
        async with test_utils.TestServer(app) as server:
            client = OAuth2Client(oauth2_config(str(server.make_url('/token'))))

            token = await client.exchange_code("abc")

        assert token == {"error": "invalid_grant"}

    @pytest.mark.asyncio
    async def test_exchange_code_without_access_token(self):
        app = self.token_app(200, {"token_type": "bearer"})
        async with test_utils.TestServer(app) as server:
            client = OAuth2Client(oauth2_config(str(server.make_url('/token'))))

            with pytest.raises(TokenError):
                await client.exchange_code("abc")

    @pytest.mark.asyncio
    async def test_exchange_code_server_error(self):
        app = self.token_app(500, {})
        async with test_utils.TestServer(app) as server:
            client = OAuth2Client(oauth2_config(str(server.make_url('/token'))))

            with pytest.raises(HttpError) as exc_info:
                await client.exchange_code("abc")

        assert exc_info.value.status == 500


class TestOAuth2Provider:
    """Test the OAuth2 authentication provider"""

    def provider(self, session, **kwargs):
        client = OAuth2Client(oauth2_config())
        client.exchange_code = AsyncMock(return_value={"access_token": "t"})
        return OAuth2Provider(client, session, **kwargs)

    @pytest.mark.asyncio
    async def test_redirect_without_code(self):
        session = MemorySessionStore({SESSION_TOKEN_KEY: {"access_token": "old"}})
        provider = self.provider(session)

        login = await provider.get_login_object({})

        state = await session.get(SESSION_STATE_KEY)
        assert isinstance(login, Login)
        assert state.startswith("wf-")
        assert f"state={state}" in login.redirect_url
        assert await session.get(SESSION_TOKEN_KEY) is None

    @pytest.mark.asyncio
    async def test_redirect_with_exception_trigger(self):
        session = MemorySessionStore()
        provider = self.provider(session, exit_trigger=EXIT_TRIGGER_EXCEPTION)

        with pytest.raises(OAuth2Redirect) as exc_info:
            await provider.get_login_object({})

        assert exc_info.value.url.startswith("https://auth.example.com/authorize?")

    def test_invalid_exit_trigger(self):
        with pytest.raises(OAuth2Error):
            self.provider(MemorySessionStore(), exit_trigger="die")

    def test_invalid_roles(self):
        with pytest.raises(OAuth2Error):
            self.provider(MemorySessionStore(), roles={"ROLE_USER": True})

    @pytest.mark.asyncio
    async def test_callback_exchanges_code(self):
        session = MemorySessionStore({SESSION_STATE_KEY: "wf-1"})
        provider = self.provider(session, roles="ROLE_USER")

        login = await provider.get_login_object({"code": "abc", "state": "wf-1"})

        provider.client.exchange_code.assert_awaited_once_with("abc")
        assert login.get_attribute('oauth2_token') == {"access_token": "t"}
        assert login.get_attribute('oauth2_roles') == ["ROLE_USER"]
        assert await session.get(SESSION_TOKEN_KEY) == {"access_token": "t"}

    @pytest.mark.asyncio
    async def test_callback_reuses_stored_token(self):
        session = MemorySessionStore({
            SESSION_STATE_KEY: "wf-1",
            SESSION_TOKEN_KEY: {"access_token": "stored"}
        })
        provider = self.provider(session)

        login = await provider.get_login_object({"code": "abc", "state": "wf-1"})

        provider.client.exchange_code.assert_not_awaited()
        assert login.get_attribute('oauth2_token') == {"access_token": "stored"}

    @pytest.mark.asyncio
    async def test_state_mismatch(self):
        session = MemorySessionStore({SESSION_STATE_KEY: "wf-1"})
        provider = self.provider(session)

        with pytest.raises(OAuth2Error):
            await provider.get_login_object({"code": "abc", "state": "wf-2"})

        provider.client.exchange_code.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_session_state(self):
        provider = self.provider(MemorySessionStore())

        with pytest.raises(OAuth2Error):
            await provider.get_login_object({"code": "abc"})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("state", ["invalid", "", None])
    async def test_callback_without_session_state(self, state):
        provider = self.provider(MemorySessionStore())

        with pytest.raises(OAuth2Error):
            await provider.get_login_object({"code": "forged-code", "state": state})

        provider.client.exchange_code.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_state_is_single_use(self):
        session = MemorySessionStore({SESSION_STATE_KEY: "wf-1"})
        provider = self.provider(session)

        assert await provider.get_login_object({"code": "abc", "state": "wf-1"}) is not None
        assert await session.get(SESSION_STATE_KEY) is None

        with pytest.raises(OAuth2Error):
            await provider.get_login_object({"code": "abc", "state": "wf-1"})

    @pytest.mark.asyncio
    async def test_refused_code(self):
        session = MemorySessionStore({SESSION_STATE_KEY: "wf-1"})
        provider = self.provider(session)
        provider.client.exchange_code.return_value = {"error": "invalid_grant"}

        login = await provider.get_login_object({"code": "abc", "state": "wf-1"})

        assert login is None
        assert await session.get(SESSION_TOKEN_KEY) is None
