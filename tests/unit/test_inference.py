"""Tests for the Messages API model client."""

import base64
import json

import httpx
import pytest
import pytest_asyncio

from stylist_ai.errors import AIServiceError, ErrorKind
from stylist_ai.inference import MessagesApiClient
from stylist_ai.types import ConversationMessage

BASE_URL = "https://model.example.com"
ENDPOINT = f"{BASE_URL}/v1/messages"


def _reply(*texts: str) -> dict:
    return {
        "id": "msg_1",
        "type": "message",
        "role": "assistant",
        "content": [{"type": "text", "text": text} for text in texts],
        "stop_reason": "end_turn",
    }


@pytest_asyncio.fixture
async def client():
    model_client = MessagesApiClient(
        "claude-3-5-sonnet-20240620", api_key="sk-test", base_url=BASE_URL, timeout=5.0
    )
    yield model_client
    await model_client.close()


class TestMessagesApiClient:
    """Tests for MessagesApiClient."""

    @pytest.mark.asyncio
    async def test_send_message(self, httpx_mock, client) -> None:
        """Test a text conversation request and response."""
        httpx_mock.add_response(url=ENDPOINT, method="POST", json=_reply("Hello! ", "How are you?"))
        history = [
            ConversationMessage(role="user", content="Hi"),
            ConversationMessage(role="assistant", content="Hello!"),
            ConversationMessage(role="user", content="Help me with style"),
        ]

        text = await client.send_message(history, system_prompt="You are a stylist")

        assert text == "Hello! How are you?"
        request = httpx_mock.get_request()
        assert request.headers["x-api-key"] == "sk-test"
        assert request.headers["anthropic-version"] == "2023-06-01"
        body = json.loads(request.content)
        assert body["model"] == "claude-3-5-sonnet-20240620"
        assert body["system"] == "You are a stylist"
        assert body["max_tokens"] == 1000
        assert [m["role"] for m in body["messages"]] == ["user", "assistant", "user"]

    @pytest.mark.asyncio
    async def test_send_message_with_image(self, httpx_mock, client) -> None:
        """Test an image request carries the base64 payload and media type."""
        httpx_mock.add_response(url=ENDPOINT, method="POST", json=_reply('{"bodyShape": "x"}'))
        png = base64.b64encode(b"\x89PNG\r\n\x1a\n0000").decode()

        text = await client.send_message_with_image(png, "Analyze this photo")

        assert text == '{"bodyShape": "x"}'
        body = json.loads(httpx_mock.get_request().content)
        assert "system" not in body
        content = body["messages"][0]["content"]
        assert content[0] == {"type": "text", "text": "Analyze this photo"}
        assert content[1]["source"]["media_type"] == "image/png"
        assert content[1]["source"]["data"] == png

    @pytest.mark.asyncio
    async def test_jpeg_media_type(self, httpx_mock, client) -> None:
        """Test non-PNG payloads are sent as JPEG."""
        httpx_mock.add_response(url=ENDPOINT, method="POST", json=_reply("ok"))
        jpeg = base64.b64encode(b"\xff\xd8\xff\xe0").decode()

        await client.send_message_with_image(jpeg, "Analyze")

        body = json.loads(httpx_mock.get_request().content)
        assert body["messages"][0]["content"][1]["source"]["media_type"] == "image/jpeg"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "trailer",
        [b"\x00\x00\x00\rIHDR", b"image-bytes", b"\xff\xff"],
    )
    async def test_png_signature_alone_selects_png(self, httpx_mock, client, trailer) -> None:
        """Test the media type depends only on the 8 signature bytes."""
        httpx_mock.add_response(url=ENDPOINT, method="POST", json=_reply("ok"))
        png = base64.b64encode(b"\x89PNG\r\n\x1a\n" + trailer).decode()

        await client.send_message_with_image(png, "Analyze")

        body = json.loads(httpx_mock.get_request().content)
        assert body["messages"][0]["content"][1]["source"]["media_type"] == "image/png"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "kind"),
        [
            (400, ErrorKind.VALIDATION),
            (401, ErrorKind.AUTHENTICATION),
            (429, ErrorKind.RATE_LIMITED),
            (500, ErrorKind.SERVER_ERROR),
            (529, ErrorKind.OVERLOADED),
        ],
    )
    async def test_http_errors(self, httpx_mock, client, status, kind) -> None:
        """Test HTTP failures carry their kind."""
        httpx_mock.add_response(url=ENDPOINT, method="POST", status_code=status, json={"error": {}})

        with pytest.raises(AIServiceError) as exc_info:
            await client.send_message([ConversationMessage(role="user", content="Hi")])

        assert exc_info.value.kind == kind
        assert exc_info.value.details == {"status_code": status}

    @pytest.mark.asyncio
    async def test_timeout(self, httpx_mock, client) -> None:
        """Test timeouts are retryable."""
        httpx_mock.add_exception(httpx.ReadTimeout("slow"), url=ENDPOINT)

        with pytest.raises(AIServiceError) as exc_info:
            await client.send_message([ConversationMessage(role="user", content="Hi")])

        assert exc_info.value.kind == ErrorKind.TIMEOUT
        assert exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_connection_error(self, httpx_mock, client) -> None:
        """Test connection failures are network errors."""
        httpx_mock.add_exception(httpx.ConnectError("refused"), url=ENDPOINT)

        with pytest.raises(AIServiceError) as exc_info:
            await client.send_message([ConversationMessage(role="user", content="Hi")])

        assert exc_info.value.kind == ErrorKind.NETWORK

    @pytest.mark.asyncio
    async def test_unexpected_body(self, httpx_mock, client) -> None:
        """Test a body without content blocks is a parse failure."""
        httpx_mock.add_response(url=ENDPOINT, method="POST", json={"unexpected": True})

        with pytest.raises(AIServiceError) as exc_info:
            await client.send_message([ConversationMessage(role="user", content="Hi")])

        assert exc_info.value.kind == ErrorKind.PARSE

    def test_env_configuration(self, monkeypatch) -> None:
        """Test defaults come from the environment."""
        monkeypatch.setenv("STYLIST_MODEL_API_KEY", "sk-env")
        monkeypatch.setenv("STYLIST_MODEL_BASE_URL", "https://proxy.example.com")
        monkeypatch.setenv("STYLIST_MODEL_TIMEOUT_SECS", "not-a-number")

        model_client = MessagesApiClient("model-x")
        assert model_client.model == "model-x"
        assert model_client._api_key == "sk-env"
        assert model_client._base_url == "https://proxy.example.com"
        assert model_client._timeout == 60.0
