import httpx
import pytest
import pytest_asyncio

from codedrafts_auth.infrastructure.dependency_injection.auth_dependencies import (
    build_auth_context,
    build_auth_services,
    build_identity_clients,
)

FACEBOOK_PROFILE = {
    "id": "E7",
    "email": "u@x.com",
    "name": "U",
    "picture": {"data": {"url": "http://img/u.png"}},
}


def _provider_handler(request: httpx.Request) -> httpx.Response:
    if request.url.host == "graph.facebook.com":
        if request.url.params.get("access_token") != "T":
            return httpx.Response(400, json={"error": {"message": "Invalid OAuth access token.", "code": 190}})
        return httpx.Response(200, json=FACEBOOK_PROFILE)
    return httpx.Response(401, json={"message": "Bad credentials"})


@pytest_asyncio.fixture
async def provider_http_client():
    async with httpx.AsyncClient(transport=httpx.MockTransport(_provider_handler)) as client:
        yield client


@pytest.fixture
def auth_services(async_session, mock_mail_dispatcher, background, password_manager, provider_http_client):
    context = build_auth_context(
        async_session,
        mail_dispatcher=mock_mail_dispatcher,
        identity_clients=build_identity_clients(provider_http_client),
        background=background,
    )
    return build_auth_services(context, password_manager=password_manager)


@pytest.fixture
def credential_authenticator(auth_services):
    return auth_services.credential_authenticator


@pytest.fixture
def user_repository(auth_services):
    return auth_services.context.user_repository


@pytest.fixture
def token_repository(auth_services):
    return auth_services.context.token_repository
