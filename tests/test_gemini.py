from __future__ import annotations

import base64

import pytest
from aiohttp import test_utils, web

from bot.ai import GeminiClient, GenerationError


async def _serve(handler):
    app = web.Application()
    app.router.add_post("/models/{target}", handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    return server


@pytest.fixture
async def gemini_server():
    servers = []

    async def start(handler):
        server = await _serve(handler)
        servers.append(server)
        return GeminiClient("test-key", api_base=str(server.make_url("/")))

    yield start
    for server in servers:
        await server.close()


async def test_html_gateway_error_is_a_generation_error(gemini_server):
    async def bad_gateway(request):
        return web.Response(status=502, text="<html><body>Bad Gateway</body></html>", content_type="text/html")

    client = await gemini_server(bad_gateway)

    with pytest.raises(GenerationError):
        await client.generate_image("a cat")


async def test_empty_body_is_a_generation_error(gemini_server):
    async def empty(request):
        return web.Response(status=200, body=b"")

    client = await gemini_server(empty)

    with pytest.raises(GenerationError):
        await client.generate_image("a cat")


async def test_api_error_payload_is_a_generation_error(gemini_server):
    async def quota(request):
        return web.json_response({"error": {"code": 429, "message": "quota"}}, status=429)

    client = await gemini_server(quota)

    with pytest.raises(GenerationError, match="429"):
        await client.generate_image("a cat")


async def test_generated_image_is_decoded(gemini_server):
    seen = {}

    async def ok(request):
        seen["target"] = request.match_info["target"]
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = await request.json()
        image = base64.b64encode(b"\x89PNG").decode("ascii")
        return web.json_response(
            {"candidates": [{"content": {"parts": [{"inlineData": {"mimeType": "image/png", "data": image}}]}}]}
        )

    client = await gemini_server(ok)

    assert await client.generate_image("a cat") == b"\x89PNG"
    assert seen["target"] == "gemini-2.5-flash-image:generateContent"
    assert seen["key"] == "test-key"
    assert seen["body"]["contents"][0]["parts"] == [{"text": "a cat"}]


async def test_missing_api_key_fails_before_any_request():
    client = GeminiClient(None)

    assert client.is_configured is False
    with pytest.raises(GenerationError):
        await client.generate_image("a cat")
