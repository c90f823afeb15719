from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer, unused_port

from sampler_cli.api.client import (
    TRANSPORT_FAILURE_MESSAGE,
    AudioServiceClient,
    status_line,
)
from sampler_cli.core import RequestOrchestrator, StatusReporter
from sampler_cli.core.presenters import Severity
from sampler_cli.exceptions import StructuredFailureError, TransportFailureError
from sampler_cli.models.params import (
    NormalizeParameters,
    OperationMode,
    SpliceParameters,
)
from sampler_cli.models.state import (
    CandidateFile,
    Failure,
    ProcessingRequest,
    SelectedFile,
    Success,
)

ZIP_BYTES = b"PK\x03\x04" + b"\x00" * 60
STATE = web.AppKey("state", dict)

NORMALIZE_REPLIES = {
    "structured": lambda: web.json_response({"error": "clipping detected"}, status=422),
    "plain_text": lambda: web.Response(status=500, text="internal failure"),
    "json_without_error": lambda: web.json_response({"detail": "nope"}, status=400),
    "blank_error": lambda: web.json_response({"error": "  "}, status=400),
    "empty": lambda: web.Response(status=503),
    "ok": lambda: web.Response(body=ZIP_BYTES, content_type="application/zip"),
}


def _selected(name: str = "track.wav", content: bytes = b"RIFF....WAVE") -> SelectedFile:
    return SelectedFile(name=name, size=len(content), last_modified=0.0, handle=content)


async def _record(request: web.Request) -> None:
    form = await request.post()
    upload = form["file"]
    request.app[STATE]["received"].append(
        {
            "path": request.path,
            "filename": upload.filename,
            "content": upload.file.read(),
            "fields": {k: v for k, v in form.items() if k != "file"},
        }
    )


async def splice_handler(request: web.Request) -> web.Response:
    await _record(request)
    delay = request.app[STATE]["delay"]
    if delay:
        await asyncio.sleep(delay)
    return web.Response(body=ZIP_BYTES, content_type="application/zip")


async def normalize_handler(request: web.Request) -> web.Response:
    await _record(request)
    return NORMALIZE_REPLIES[request.app[STATE]["normalize_reply"]]()


async def health_handler(request: web.Request) -> web.Response:
    return web.json_response(
        {"status": "healthy", "version": "1.2.0", "uptime_seconds": 42}
    )


@pytest_asyncio.fixture
async def server():
    app = web.Application()
    app[STATE] = {"received": [], "delay": 0, "normalize_reply": "ok"}
    app.router.add_post("/api/v1/audio/splice/multipart", splice_handler)
    app.router.add_post("/api/v1/audio/normalize/multipart", normalize_handler)
    app.router.add_get("/api/v1/health", health_handler)
    async with TestServer(app) as srv:
        yield srv


@pytest_asyncio.fixture
async def client(server):
    async with AudioServiceClient(str(server.make_url("/"))) as c:
        yield c


@pytest.mark.asyncio
async def test_splice_upload_carries_file_and_fields(server, client):
    request = ProcessingRequest(
        mode=OperationMode.SPLICE,
        file=_selected(),
        parameters=SpliceParameters(duration=2.0, count=4, reverse=False),
    )

    artifact = await client.process(request)

    assert artifact == ZIP_BYTES
    received = server.app[STATE]["received"][0]
    assert received["path"] == "/api/v1/audio/splice/multipart"
    assert received["filename"] == "track.wav"
    assert received["content"] == b"RIFF....WAVE"
    assert received["fields"] == {
        "spliceDuration": "2",
        "spliceCount": "4",
        "reverse": "false",
    }


@pytest.mark.asyncio
async def test_normalize_upload_fields(server, client):
    request = ProcessingRequest(
        mode=OperationMode.NORMALIZE,
        file=_selected(),
        parameters=NormalizeParameters(target_level=0.8, apply_to_segments=True),
    )

    await client.process(request)

    assert server.app[STATE]["received"][0]["fields"] == {
        "targetLevel": "0.8",
        "applyToSplices": "true",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("reply", "expected"),
    [
        ("structured", "clipping detected"),
        ("plain_text", "HTTP 500: Internal Server Error"),
        ("json_without_error", "HTTP 400: Bad Request"),
        ("blank_error", "HTTP 400: Bad Request"),
        ("empty", "HTTP 503: Service Unavailable"),
    ],
)
async def test_error_message_extraction(server, client, reply, expected):
    server.app[STATE]["normalize_reply"] = reply
    request = ProcessingRequest(
        mode=OperationMode.NORMALIZE,
        file=_selected(),
        parameters=NormalizeParameters(target_level=0.8),
    )

    with pytest.raises(StructuredFailureError) as excinfo:
        await client.process(request)

    assert excinfo.value.message == expected
    assert str(excinfo.value) == expected


@pytest.mark.asyncio
async def test_unreachable_service_is_a_transport_failure():
    request = ProcessingRequest(
        mode=OperationMode.SPLICE,
        file=_selected(),
        parameters=SpliceParameters(duration=1, count=1),
    )
    async with AudioServiceClient(f"http://127.0.0.1:{unused_port()}") as client:
        with pytest.raises(TransportFailureError) as excinfo:
            await client.process(request)

    assert excinfo.value.message == TRANSPORT_FAILURE_MESSAGE
    assert excinfo.value.status is None


@pytest.mark.asyncio
async def test_transport_timeout_is_a_transport_failure(server):
    server.app[STATE]["delay"] = 1
    request = ProcessingRequest(
        mode=OperationMode.SPLICE,
        file=_selected(),
        parameters=SpliceParameters(duration=1, count=1),
    )
    async with AudioServiceClient(
        str(server.make_url("/")), timeout=0.3, connect_timeout=0.3
    ) as client:
        with pytest.raises(TransportFailureError):
            await client.process(request)


@pytest.mark.asyncio
async def test_health(client):
    health = await client.health()
    assert health.status == "healthy"
    assert health.version == "1.2.0"


@pytest.mark.asyncio
async def test_status_probe_online(client):
    status = StatusReporter()
    assert await status.probe(client) is True
    assert status.service_status == "API Online - v1.2.0"
    assert status.service_severity is Severity.SUCCESS


@pytest.mark.asyncio
async def test_status_probe_offline_does_not_raise():
    status = StatusReporter()
    async with AudioServiceClient(f"http://127.0.0.1:{unused_port()}") as client:
        assert await status.probe(client) is False
    assert status.service_status == "API Offline"
    assert status.service_severity is Severity.ERROR


@pytest.mark.asyncio
async def test_service_error_end_to_end(server, client):
    server.app[STATE]["normalize_reply"] = "structured"
    orchestrator = RequestOrchestrator(client, registry=client.registry)
    orchestrator.registry.form.apply_to_segments = True
    orchestrator.registry.form.target_level = 0.8
    orchestrator.select_file(CandidateFile.from_bytes("track.wav", b"RIFF"))
    orchestrator.set_mode(OperationMode.NORMALIZE)

    outcome = await orchestrator.submit()

    assert outcome == Failure(message="clipping detected")
    assert orchestrator.errors.message == "clipping detected"
    assert orchestrator.results.current is None


@pytest.mark.asyncio
async def test_offline_probe_does_not_block_submission(server):
    async with AudioServiceClient(f"http://127.0.0.1:{unused_port()}") as offline:
        async with AudioServiceClient(str(server.make_url("/"))) as online:
            orchestrator = RequestOrchestrator(online, registry=online.registry)
            assert await orchestrator.probe_service(offline) is False

            orchestrator.select_file(CandidateFile.from_bytes("track.wav", b"RIFF"))
            outcome = await orchestrator.submit()

    assert isinstance(outcome, Success)
    assert outcome.artifact == ZIP_BYTES


@pytest.mark.parametrize(
    ("status", "reason", "expected"),
    [
        (500, None, "HTTP 500: Internal Server Error"),
        (503, "", "HTTP 503: Service Unavailable"),
        (422, "Bad Sample", "HTTP 422: Bad Sample"),
        (599, None, "HTTP 599: "),
    ],
)
def test_status_line_never_shows_a_missing_reason(status, reason, expected):
    assert status_line(status, reason) == expected
