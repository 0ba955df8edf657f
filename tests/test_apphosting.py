import asyncio
import json

import httpx
import pytest

from hostops.core.adapters.apphosting import AppHostingAdapter
from hostops.core.backends import (
    Backend,
    Codebase,
    LookupFailure,
    NotFound,
    OperationStatus,
    ResourceKey,
)
from hostops.core.errors import ControlPlaneError

ORIGIN = "https://apphosting.test"
BACKEND_PATH = "/v1alpha/projects/p1/locations/us-central1/backends/svc-1"


def _call(handler, fn, **adapter_kwargs):
    """Run fn(adapter) against a MockTransport-backed client."""

    async def _run():
        transport = httpx.MockTransport(handler)
        async with httpx.AsyncClient(transport=transport) as client:
            adapter = AppHostingAdapter(client, origin=ORIGIN, **adapter_kwargs)
            return await fn(adapter)

    return asyncio.run(_run())


def test_get_backend_parses_payload(monkeypatch):
    monkeypatch.delenv("HOSTOPS_ACCESS_TOKEN", raising=False)
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "name": "projects/p1/locations/us-central1/backends/svc-1",
                "codebase": {"repository": "r1", "rootDirectory": "/"},
                "uri": "svc-1--p1.us-central1.hosted.app",
                "createTime": "2024-01-01T00:00:00Z",
            },
        )

    result = _call(handler, lambda a: a.get_backend("p1", "us-central1", "svc-1"))

    assert isinstance(result, Backend)
    assert result.codebase == Codebase(repository="r1", root_directory="/")
    assert result.uri == "svc-1--p1.us-central1.hosted.app"
    assert seen[0].method == "GET"
    assert seen[0].url.path == BACKEND_PATH
    assert "authorization" not in seen[0].headers


def test_get_backend_maps_404_to_not_found():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": {"code": 404, "message": "not found"}})

    result = _call(handler, lambda a: a.get_backend("p1", "us-central1", "svc-1"))

    assert result == NotFound(ResourceKey("p1", "us-central1", "svc-1"))


def test_get_backend_wraps_other_errors_as_lookup_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            403, json={"error": {"code": 403, "message": "The caller does not have permission"}}
        )

    result = _call(handler, lambda a: a.get_backend("p1", "us-central1", "svc-1"))

    assert isinstance(result, LookupFailure)
    assert isinstance(result.cause, ControlPlaneError)
    assert result.cause.status_code == 403
    assert result.cause.message == "The caller does not have permission"


def test_get_backend_wraps_transport_errors_as_lookup_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = _call(handler, lambda a: a.get_backend("p1", "us-central1", "svc-1"))

    assert isinstance(result, LookupFailure)
    assert isinstance(result.cause, ControlPlaneError)
    assert isinstance(result.cause.__cause__, httpx.ConnectError)
    assert "connection refused" in result.cause.message


def test_get_backend_wraps_non_json_body_as_lookup_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    result = _call(handler, lambda a: a.get_backend("p1", "us-central1", "svc-1"))

    assert isinstance(result, LookupFailure)
    assert isinstance(result.cause, ControlPlaneError)
    assert result.cause.status_code == 200
    assert "non-JSON" in result.cause.message


def test_get_backend_wraps_non_object_json_as_lookup_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=["svc-1"])

    result = _call(handler, lambda a: a.get_backend("p1", "us-central1", "svc-1"))

    assert isinstance(result, LookupFailure)
    assert isinstance(result.cause, ControlPlaneError)
    assert "non-object" in result.cause.message


def test_get_backend_ignores_malformed_codebase():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"name": "b", "codebase": "r1", "labels": []})

    result = _call(handler, lambda a: a.get_backend("p1", "us-central1", "svc-1"))

    assert isinstance(result, Backend)
    assert result.codebase is None
    assert result.labels == {}


def test_create_backend_posts_request_body_and_returns_handle():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"name": "projects/p1/locations/us-central1/operations/op-1"})

    body = Backend(
        codebase=Codebase(repository="r1"),
        name="should-not-be-sent",
    )
    handle = _call(
        handler,
        lambda a: a.create_backend("p1", "us-central1", body, "svc-1"),
        access_token="tok",
    )

    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/v1alpha/projects/p1/locations/us-central1/backends"
    assert request.url.params["backendId"] == "svc-1"
    assert request.headers["authorization"] == "Bearer tok"
    assert json.loads(request.content) == {
        "labels": {},
        "codebase": {"repository": "r1", "rootDirectory": "/"},
    }
    assert handle.name == "projects/p1/locations/us-central1/operations/op-1"
    assert handle.poller_name == "create-p1-us-central1-svc-1"


def test_get_operation_parses_status():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1alpha/projects/p1/locations/us-central1/operations/op-1"
        return httpx.Response(
            200,
            json={
                "name": "projects/p1/locations/us-central1/operations/op-1",
                "done": True,
                "error": {"code": 9, "message": "failed precondition"},
            },
        )

    status = _call(
        handler,
        lambda a: a.get_operation("projects/p1/locations/us-central1/operations/op-1"),
    )

    assert status == OperationStatus(
        name="projects/p1/locations/us-central1/operations/op-1",
        done=True,
        error={"code": 9, "message": "failed precondition"},
    )


def test_create_backend_raises_control_plane_error_on_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ControlPlaneError) as excinfo:
        _call(
            handler,
            lambda a: a.create_backend("p1", "us-central1", Backend(), "svc-1"),
        )

    assert isinstance(excinfo.value.__cause__, httpx.ReadTimeout)


def test_get_operation_raises_control_plane_error_on_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection reset", request=request)

    with pytest.raises(ControlPlaneError, match="connection reset"):
        _call(
            handler,
            lambda a: a.get_operation("projects/p1/locations/us-central1/operations/op-1"),
        )


def test_get_operation_raises_control_plane_error_on_non_json_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="not json")

    with pytest.raises(ControlPlaneError, match="non-JSON"):
        _call(
            handler,
            lambda a: a.get_operation("projects/p1/locations/us-central1/operations/op-1"),
        )
