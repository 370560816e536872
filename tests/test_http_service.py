from __future__ import annotations

import errno
import json
from typing import Optional

import httpx
import pytest

from conftest import BASE_URL, UserDto, reply
from core.domain.errors import (
    DecodeFailed,
    FileNotFound,
    RequestFailed,
    TransportFault,
    Unauthorized,
)
from core.domain.models import OutcomeKind, RequestDescriptor

USER_BODY = '{"id":1,"name":"a"}'


async def _call(service, verb: str, tmp_path, response_type=UserDto):
    if verb == "get":
        return await service.get("/users/1", response_type=response_type)
    if verb == "post":
        return await service.post("/users", {"name": "a"}, response_type=response_type)
    if verb == "put":
        return await service.put("/users/1", {"name": "a"}, response_type=response_type)
    if verb == "post_form":
        return await service.post_form("/users", [("name", "a")], response_type=response_type)
    if verb == "post_files":
        upload = tmp_path / "avatar.png"
        upload.write_bytes(b"\x89PNG")
        return await service.post_files("/users/1/avatar", [upload], response_type=response_type)
    raise AssertionError(verb)


VERBS = ["get", "post", "put", "post_form", "post_files"]


@pytest.mark.parametrize("verb", VERBS)
async def test_success_decodes_into_target_type(make_service, tmp_path, verb):
    service, transport = make_service(reply(200, USER_BODY))

    user = await _call(service, verb, tmp_path)

    assert user == UserDto(id=1, name="a")
    assert len(transport.requests) == 1
    await service.aclose()


@pytest.mark.parametrize("verb", VERBS)
async def test_401_is_unauthorized_even_with_decodable_body(make_service, tmp_path, verb):
    service, _ = make_service(reply(401, USER_BODY))

    with pytest.raises(Unauthorized):
        await _call(service, verb, tmp_path)
    await service.aclose()


@pytest.mark.parametrize("verb", VERBS)
async def test_other_status_is_request_failed_with_reason_phrase(make_service, tmp_path, verb):
    service, _ = make_service(reply(500, '"boom"', reason="boom"))

    with pytest.raises(RequestFailed) as exc_info:
        await _call(service, verb, tmp_path)

    assert exc_info.value.reason_phrase == "boom"
    assert exc_info.value.status_code == 500
    assert str(exc_info.value) == "boom"
    await service.aclose()


async def test_request_failed_defaults_to_standard_reason_phrase(make_service):
    service, _ = make_service(reply(404, "nope"))

    with pytest.raises(RequestFailed) as exc_info:
        await service.get("/missing")

    assert exc_info.value.reason_phrase == "Not Found"
    assert exc_info.value.body == "nope"
    await service.aclose()


async def test_request_failed_does_not_decode_a_valid_body(make_service):
    service, _ = make_service(reply(400, USER_BODY))

    with pytest.raises(RequestFailed):
        await service.post_form("/users", {"name": "a"}, response_type=UserDto)
    await service.aclose()


@pytest.mark.parametrize("verb", VERBS)
async def test_undecodable_2xx_body_is_decode_failed(make_service, tmp_path, verb):
    service, _ = make_service(reply(200, "<html>not json</html>"))

    with pytest.raises(DecodeFailed) as exc_info:
        await _call(service, verb, tmp_path)

    assert exc_info.value.raw_body == "<html>not json</html>"
    await service.aclose()


async def test_form_post_null_payload_is_a_failure_not_a_null_result(make_service):
    service, _ = make_service(reply(200, "null"))

    with pytest.raises(DecodeFailed) as exc_info:
        await service.post_form("/login", [("user", "a")], response_type=Optional[UserDto])

    assert exc_info.value.raw_body == "null"
    await service.aclose()


async def test_form_post_empty_body_is_a_failure(make_service):
    service, _ = make_service(reply(200, ""))

    with pytest.raises(DecodeFailed):
        await service.post_form("/login", [("user", "a")], response_type=UserDto)
    await service.aclose()


async def test_null_payload_is_a_failure_for_untyped_calls(make_service):
    service, _ = make_service(reply(200, "null"))

    with pytest.raises(DecodeFailed):
        await service.get("/users/1")
    await service.aclose()


async def test_payload_that_does_not_match_type_is_decode_failed(make_service):
    service, _ = make_service(reply(200, '{"id":"x"}'))

    with pytest.raises(DecodeFailed):
        await service.get("/users/1", response_type=UserDto)
    await service.aclose()


async def test_untyped_call_returns_plain_json(make_service):
    service, _ = make_service(reply(201, '[{"id":1},{"id":2}]'))

    assert await service.post("/batch", [1, 2]) == [{"id": 1}, {"id": 2}]
    await service.aclose()


async def test_decode_into_list_of_models(make_service):
    service, _ = make_service(reply(200, '[{"id":1,"name":"a"},{"id":2,"name":"b"}]'))

    users = await service.get("/users", response_type=list[UserDto])

    assert [u.name for u in users] == ["a", "b"]
    await service.aclose()


async def test_json_body_is_utf8_with_json_content_type(make_service):
    service, transport = make_service(reply(200, USER_BODY))

    await service.post("/users", {"name": "ñandú"}, response_type=UserDto)

    request = transport.requests[0]
    assert request.method == "POST"
    assert request.url == httpx.URL(f"{BASE_URL}/users")
    assert request.headers["content-type"].startswith("application/json")
    assert json.loads(request.content.decode("utf-8")) == {"name": "ñandú"}
    await service.aclose()


async def test_json_body_accepts_pydantic_models(make_service):
    service, transport = make_service(reply(200, USER_BODY))

    await service.put("/users/1", UserDto(id=1, name="a"), response_type=UserDto)

    assert json.loads(transport.requests[0].content) == {"id": 1, "name": "a"}
    await service.aclose()


@pytest.mark.parametrize("verb", ["post", "put"])
async def test_absent_body_sends_no_content(make_service, verb):
    service, transport = make_service(reply(200, USER_BODY))

    await getattr(service, verb)("/users/1", response_type=UserDto)

    request = transport.requests[0]
    assert request.method == verb.upper()
    assert request.content == b""
    assert "content-type" not in request.headers
    await service.aclose()


async def test_get_sends_no_body(make_service):
    service, transport = make_service(reply(200, USER_BODY))

    await service.get("/users/1", response_type=UserDto)

    assert transport.requests[0].method == "GET"
    assert transport.requests[0].content == b""
    await service.aclose()


async def test_form_pairs_keep_order_and_duplicates(make_service):
    service, transport = make_service(reply(200, USER_BODY))

    await service.post_form("/form", [("b", "2"), ("a", "1"), ("b", "3 4")], response_type=UserDto)

    request = transport.requests[0]
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"
    assert request.content == b"b=2&a=1&b=3+4"
    await service.aclose()


async def test_missing_upload_file_fails_before_any_request(make_service, tmp_path):
    service, transport = make_service(reply(200, USER_BODY))
    present = tmp_path / "present.txt"
    present.write_text("hello")
    missing = tmp_path / "missing.txt"

    with pytest.raises(FileNotFound) as exc_info:
        await service.post_files("/upload", [present, missing], response_type=UserDto)

    assert exc_info.value.path == str(missing)
    assert isinstance(exc_info.value, FileNotFoundError)
    assert transport.requests == []
    await service.aclose()


async def test_all_files_go_in_a_single_multipart_request(make_service, tmp_path):
    service, transport = make_service(reply(200, USER_BODY))
    first = tmp_path / "a.txt"
    first.write_text("first file")
    second = tmp_path / "nested" / "b.json"
    second.parent.mkdir()
    second.write_text('{"x": 1}')

    await service.post_files("/upload", [str(first), second], response_type=UserDto)

    assert len(transport.requests) == 1
    request = transport.requests[0]
    assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
    body = request.content
    assert b'name="File"; filename="a.txt"' in body
    assert b'name="File"; filename="b.json"' in body
    assert b"first file" in body
    assert b'{"x": 1}' in body
    assert body.index(b"a.txt") < body.index(b"b.json")
    await service.aclose()


async def test_transport_fault_surfaces_unchanged(make_service):
    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    service, _ = make_service(_refuse)

    with pytest.raises(httpx.ConnectError) as exc_info:
        await service.get("/users/1", response_type=UserDto)

    assert isinstance(exc_info.value, TransportFault)
    await service.aclose()


async def test_timeout_surfaces_unchanged(make_service):
    def _slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    service, _ = make_service(_slow)

    with pytest.raises(httpx.ReadTimeout):
        await service.post("/users", {"name": "a"})
    await service.aclose()


async def test_send_returns_classified_outcomes_without_raising(make_service):
    statuses = iter([(200, USER_BODY), (401, USER_BODY), (503, "down"), (200, "garbage")])

    def _handler(request: httpx.Request) -> httpx.Response:
        status, body = next(statuses)
        return httpx.Response(status, text=body)

    service, _ = make_service(_handler)
    descriptor = RequestDescriptor.get("/users/1")

    outcomes = [await service.send(descriptor, response_type=UserDto) for _ in range(4)]

    assert [o.kind for o in outcomes] == [
        OutcomeKind.SUCCESS,
        OutcomeKind.UNAUTHORIZED,
        OutcomeKind.FAILED,
        OutcomeKind.DECODE_FAILED,
    ]
    assert outcomes[0].value == UserDto(id=1, name="a")
    assert outcomes[1].value is None
    assert outcomes[2].reason_phrase == "Service Unavailable"
    assert outcomes[3].body == "garbage"
    await service.aclose()


async def test_session_sends_user_agent_and_keeps_cookies(make_service):
    seen_cookies: list[str | None] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen_cookies.append(request.headers.get("cookie"))
        if request.url.path == "/login":
            return httpx.Response(200, json={"id": 1, "name": "a"}, headers={"set-cookie": "sid=abc; Path=/"})
        return httpx.Response(200, json={"id": 1, "name": "a"})

    service, transport = make_service(_handler)

    await service.post_form("/login", {"user": "a"}, response_type=UserDto)
    await service.get("/me", response_type=UserDto)

    assert transport.requests[0].headers["user-agent"] == "InCo/0.1"
    assert seen_cookies == [None, "sid=abc"]
    assert service.cookies.get("sid") == "abc"
    await service.aclose()


async def test_async_context_manager_closes_session(make_service):
    service, _ = make_service(reply(200, USER_BODY))

    async with service as svc:
        assert await svc.get("/users/1", response_type=UserDto) == UserDto(id=1, name="a")

    with pytest.raises(RuntimeError):
        await service.get("/users/1", response_type=UserDto)


def test_from_settings_requires_base_url():
    from adapters.http_service import HttpService
    from core.config import ClientSettings

    with pytest.raises(ValueError):
        HttpService.from_settings(ClientSettings(_env_file=None))


async def test_from_settings_binds_base_url_and_tls_policy(settings):
    from adapters.http_service import HttpService

    service = HttpService.from_settings(settings.model_copy(update={"ignore_certificate_validation": True}))

    assert service.base_url == httpx.URL(f"{BASE_URL}/")
    assert service.ignore_certificate_validation is True
    await service.aclose()


def test_missing_upload_file_message_names_the_path(tmp_path):
    missing = tmp_path / "x.txt"

    error = FileNotFound(str(missing))

    assert str(error) == f"File not exist: {missing}"
    assert error.errno == errno.ENOENT
    assert error.filename == str(missing)


async def test_constructor_ignores_environment_and_dotenv(monkeypatch, tmp_path):
    from adapters.http_service import HttpService

    monkeypatch.setenv("INCO_IGNORE_CERTIFICATE_VALIDATION", "true")
    monkeypatch.setenv("INCO_USER_AGENT", "from-env/9")
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("INCO_IGNORE_CERTIFICATE_VALIDATION=true\n", encoding="utf-8")
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=USER_BODY)

    service = HttpService(BASE_URL, ignore_certificate_validation=False, transport=httpx.MockTransport(_handler))
    default_service = HttpService(BASE_URL)

    assert service.ignore_certificate_validation is False
    assert default_service.ignore_certificate_validation is False
    await service.get("/users/1", response_type=UserDto)
    assert seen[0].headers["user-agent"] == "InCo/0.1"
    await service.aclose()
    await default_service.aclose()


async def test_explicit_tls_flag_wins_over_settings(settings):
    from adapters.http_service import HttpService

    permissive_settings = settings.model_copy(update={"ignore_certificate_validation": True})

    service = HttpService(BASE_URL, settings=permissive_settings)

    assert service.ignore_certificate_validation is False
    await service.aclose()


async def test_multipart_field_name_is_always_file(make_service, tmp_path):
    service, transport = make_service(reply(200, USER_BODY))
    upload = tmp_path / "doc.pdf"
    upload.write_bytes(b"%PDF")

    await service.post_files("/upload", [upload], response_type=UserDto)

    assert b'name="File"; filename="doc.pdf"' in transport.requests[0].content
    await service.aclose()
