import json

import httpx
import pytest

from fastfood_server.appwrite_client import AppwriteClient, AppwriteException, Query


def make_client(settings, handler):
    return AppwriteClient(settings, transport=httpx.MockTransport(handler))


def test_query_equal():
    assert json.loads(Query.equal("accountID", "acc1")) == {
        "method": "equal",
        "attribute": "accountID",
        "values": ["acc1"],
    }


@pytest.mark.asyncio
async def test_project_headers_are_sent(appwrite_settings):
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(200, json={"$id": "acc1"})

    client = make_client(appwrite_settings, handler)
    account = await client.get_account()

    request = seen["request"]
    assert account == {"$id": "acc1"}
    assert request.method == "GET"
    assert request.url.path == "/v1/account"
    assert request.headers["X-Appwrite-Project"] == "proj"
    assert request.headers["X-Appwrite-Response-Format"] == "1.5.0"


@pytest.mark.asyncio
async def test_create_account_body(appwrite_settings):
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json={"$id": "acc1"})

    client = make_client(appwrite_settings, handler)
    await client.create_account("john.doe@example.com", "Passw0rd!", "John Doe")

    assert bodies == [
        {
            "userId": "unique()",
            "email": "john.doe@example.com",
            "password": "Passw0rd!",
            "name": "John Doe",
        }
    ]


@pytest.mark.asyncio
async def test_list_documents_sends_queries(appwrite_settings):
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(200, json={"total": 1, "documents": [{"$id": "u1"}]})

    client = make_client(appwrite_settings, handler)
    documents = await client.list_documents("users", [Query.equal("accountID", "acc1")])

    request = seen["request"]
    assert documents == [{"$id": "u1"}]
    assert request.url.path == f"/v1/databases/{appwrite_settings.database_id}/collections/users/documents"
    [query] = request.url.params.get_list("queries[]")
    assert json.loads(query)["values"] == ["acc1"]


@pytest.mark.asyncio
async def test_create_document_body(appwrite_settings):
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json={"$id": "doc1"})

    client = make_client(appwrite_settings, handler)
    await client.create_document("users", {"name": "John Doe"})

    assert bodies == [{"documentId": "unique()", "data": {"name": "John Doe"}}]


@pytest.mark.asyncio
async def test_error_response_raises(appwrite_settings):
    def handler(request):
        return httpx.Response(
            401,
            json={
                "message": "Invalid credentials. Please check the email and password.",
                "code": 401,
                "type": "user_invalid_credentials",
            },
        )

    client = make_client(appwrite_settings, handler)

    with pytest.raises(AppwriteException) as exc_info:
        await client.create_email_session("john.doe@example.com", "wrong")

    assert exc_info.value.code == 401
    assert exc_info.value.type == "user_invalid_credentials"
    assert exc_info.value.message.startswith("Invalid credentials")


@pytest.mark.asyncio
async def test_error_without_json_body(appwrite_settings):
    def handler(request):
        return httpx.Response(500, text="upstream exploded")

    client = make_client(appwrite_settings, handler)

    with pytest.raises(AppwriteException) as exc_info:
        await client.get_account()

    assert exc_info.value.code == 500
    assert exc_info.value.message == "Internal Server Error"


@pytest.mark.asyncio
async def test_transport_error_becomes_network_failure(appwrite_settings):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(appwrite_settings, handler)

    with pytest.raises(AppwriteException) as exc_info:
        await client.get_account()

    assert exc_info.value.message == "Network request failed"


@pytest.mark.asyncio
async def test_session_header_is_kept_until_sign_out(appwrite_settings):
    requests = []

    def handler(request):
        requests.append(request)
        if request.url.path.endswith("/sessions/email"):
            return httpx.Response(
                201, json={"$id": "s1"}, headers={"X-Fallback-Cookies": '{"a_session_proj":"token"}'}
            )
        if request.method == "DELETE":
            return httpx.Response(204)
        return httpx.Response(200, json={"$id": "acc1"})

    client = make_client(appwrite_settings, handler)
    await client.create_email_session("john.doe@example.com", "Passw0rd!")
    await client.get_account()
    result = await client.delete_current_session()
    await client.get_account()

    assert result is None
    assert requests[1].headers["X-Fallback-Cookies"] == '{"a_session_proj":"token"}'
    assert "X-Fallback-Cookies" not in requests[3].headers


def test_avatar_initials_url(appwrite_settings):
    client = AppwriteClient(appwrite_settings)

    url = client.avatar_initials_url("John Doe")

    assert url == "https://appwrite.test/v1/avatars/initials?name=John+Doe&project=proj"


@pytest.mark.asyncio
async def test_failed_sign_out_still_drops_local_session(appwrite_settings):
    requests = []

    def handler(request):
        requests.append(request)
        if request.url.path.endswith("/sessions/email"):
            return httpx.Response(
                201,
                json={"$id": "s1"},
                headers={
                    "Set-Cookie": "a_session_proj=token; Path=/",
                    "X-Fallback-Cookies": '{"a_session_proj":"token"}',
                },
            )
        if request.method == "DELETE":
            return httpx.Response(500, json={"message": "Server Error", "code": 500})
        return httpx.Response(200, json={"$id": "acc1"})

    client = make_client(appwrite_settings, handler)
    await client.create_email_session("john.doe@example.com", "Passw0rd!")
    await client.get_account()

    with pytest.raises(AppwriteException):
        await client.delete_current_session()
    await client.get_account()

    assert "a_session_proj=token" in requests[1].headers["Cookie"]
    assert "Cookie" not in requests[3].headers
    assert "X-Fallback-Cookies" not in requests[3].headers
