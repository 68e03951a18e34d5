"""FeedbackService 单元测试

测试内容：
1. 请求体结构与认证头
2. 非 2xx / 解码失败 / 传输错误的映射
3. submit_with_attachments 上传后提交
"""

import json
from unittest.mock import MagicMock

import httpx
import pytest
from conftest import (
    API_KEY,
    FEEDBACK_ENDPOINT,
    UPLOAD_URL_ENDPOINT,
    json_response,
    slot_response,
)
from yapkit.exceptions import (
    DecodingError,
    FeedbackNetworkError,
    HttpError,
    InvalidResponseError,
    ServerError,
    UploadFailedError,
)
from yapkit.models import FeedbackType
from yapkit.service import FeedbackService

SUCCESS_BODY = {
    "success": True,
    "feedbackId": "abc-123",
    "githubIssue": "https://github.com/user/repo/issues/42",
}


@pytest.fixture
def service(config, transport, device_info) -> FeedbackService:
    return FeedbackService(config, transport=transport, device_info_provider=lambda: device_info)


def _sent_body(handler) -> dict:
    return json.loads(handler.requests_for("POST")[-1].content)


class TestSubmit:
    """submit() 正常路径"""

    async def test_success_with_null_issue(self, service, handler):
        handler.add(
            "POST",
            FEEDBACK_ENDPOINT,
            json_response(200, {"success": True, "feedbackId": "abc-123", "githubIssue": None}),
        )

        response = await service.submit("The app is great!")

        assert response.feedback_id == "abc-123"
        assert response.github_issue is None

    async def test_minimal_payload_shape(self, service, handler):
        """未给 type/email/attachments 时请求体中不出现这些键"""
        handler.add("POST", FEEDBACK_ENDPOINT, json_response(200, SUCCESS_BODY))

        await service.submit("The app is great!")

        body = _sent_body(handler)
        assert set(body) == {"message", "deviceInfo"}
        assert body["message"] == "The app is great!"
        assert body["deviceInfo"]["model"] == "iPhone15,2"

    async def test_headers(self, service, handler):
        handler.add("POST", FEEDBACK_ENDPOINT, json_response(200, SUCCESS_BODY))

        await service.submit("hello")

        request = handler.requests[0]
        assert str(request.url) == FEEDBACK_ENDPOINT
        assert request.headers["Authorization"] == f"Bearer {API_KEY}"
        assert request.headers["Content-Type"] == "application/json"

    async def test_type_and_email_included(self, service, handler):
        handler.add("POST", FEEDBACK_ENDPOINT, json_response(201, SUCCESS_BODY))

        response = await service.submit(
            "it crashed on launch",
            feedback_type=FeedbackType.CRASH,
            email="me@example.com",
        )

        body = _sent_body(handler)
        assert body["type"] == "crash"
        assert body["email"] == "me@example.com"
        assert response.github_issue == SUCCESS_BODY["githubIssue"]

    async def test_empty_attachments_omitted(self, service, handler):
        handler.add("POST", FEEDBACK_ENDPOINT, json_response(200, SUCCESS_BODY))

        await service.submit("hello", attachments=[])

        assert "attachments" not in _sent_body(handler)

    async def test_explicit_device_info_skips_provider(
        self, config, transport, handler, device_info
    ):
        """显式传入 device_info 时不调用 provider"""
        provider = MagicMock()
        service = FeedbackService(config, transport=transport, device_info_provider=provider)
        handler.add("POST", FEEDBACK_ENDPOINT, json_response(200, SUCCESS_BODY))

        await service.submit("hello", device_info=device_info)

        provider.assert_not_called()
        assert _sent_body(handler)["deviceInfo"]["osVersion"] == "iOS 17.4"

    async def test_provider_used_when_missing(self, config, transport, handler, device_info):
        provider = MagicMock(return_value=device_info)
        service = FeedbackService(config, transport=transport, device_info_provider=provider)
        handler.add("POST", FEEDBACK_ENDPOINT, json_response(200, SUCCESS_BODY))

        await service.submit("hello")

        provider.assert_called_once_with()


class TestSubmitErrors:
    """submit() 错误映射"""

    async def test_server_error_message(self, service, handler):
        handler.add("POST", FEEDBACK_ENDPOINT, json_response(500, {"error": "rate limited"}))

        with pytest.raises(ServerError) as exc_info:
            await service.submit("hello")

        assert exc_info.value.message == "rate limited"
        assert str(exc_info.value) == "rate limited"

    async def test_http_error_without_body(self, service, handler):
        handler.add("POST", FEEDBACK_ENDPOINT, httpx.Response(404, content=b"not found"))

        with pytest.raises(HttpError) as exc_info:
            await service.submit("hello")

        assert exc_info.value.status_code == 404

    async def test_decoding_error(self, service, handler):
        handler.add("POST", FEEDBACK_ENDPOINT, json_response(200, {"success": True}))

        with pytest.raises(DecodingError):
            await service.submit("hello")

    async def test_network_error(self, service, handler):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        handler.add("POST", FEEDBACK_ENDPOINT, refuse)

        with pytest.raises(FeedbackNetworkError) as exc_info:
            await service.submit("hello")

        assert isinstance(exc_info.value.original_error, httpx.ConnectError)

    async def test_malformed_response(self, service, handler):
        """协议层错误视为未得到合法 HTTP 响应"""

        def broken(request: httpx.Request) -> httpx.Response:
            raise httpx.RemoteProtocolError("Server disconnected", request=request)

        handler.add("POST", FEEDBACK_ENDPOINT, broken)

        with pytest.raises(InvalidResponseError):
            await service.submit("hello")


class TestSubmitWithAttachments:
    """上传后提交"""

    async def test_uploads_then_submits(self, service, handler, image_attachment, video_attachment):
        handler.add("POST", UPLOAD_URL_ENDPOINT, slot_response(2))
        handler.add("POST", FEEDBACK_ENDPOINT, json_response(200, SUCCESS_BODY))
        events = []

        response = await service.submit_with_attachments(
            "see attached",
            [image_attachment, video_attachment],
            feedback_type=FeedbackType.INCORRECT_BEHAVIOR,
            progress_handler=events.append,
        )

        assert response.feedback_id == "abc-123"
        assert [(r.method, r.url.path) for r in handler.requests] == [
            ("POST", "/api/feedback/upload-url"),
            ("PUT", "/upload/file-0"),
            ("PUT", "/upload/file-1"),
            ("POST", "/api/feedback"),
        ]
        assert len(events) == 4

        body = _sent_body(handler)
        assert body["type"] == "incorrect_behavior"
        assert body["attachments"] == [
            {
                "storagePath": "feedback/file-0",
                "fileName": "screenshot.png",
                "fileSize": image_attachment.file_size,
                "mimeType": "image/png",
                "width": 4,
                "height": 3,
            },
            {
                "storagePath": "feedback/file-1",
                "fileName": "recording.mp4",
                "fileSize": video_attachment.file_size,
                "mimeType": "video/mp4",
                "width": 1920,
                "height": 1080,
                "durationSeconds": 12.5,
            },
        ]

    async def test_no_attachments_submits_directly(self, service, handler):
        handler.add("POST", FEEDBACK_ENDPOINT, json_response(200, SUCCESS_BODY))

        await service.submit_with_attachments("plain", [])

        assert [str(r.url) for r in handler.requests] == [FEEDBACK_ENDPOINT]
        assert "attachments" not in _sent_body(handler)

    async def test_upload_failure_skips_submit(self, service, handler, image_attachment):
        handler.add("POST", UPLOAD_URL_ENDPOINT, slot_response(1))
        handler.add(
            "PUT",
            "https://storage.example.com/upload/file-0?token=t0",
            httpx.Response(403),
        )

        with pytest.raises(UploadFailedError):
            await service.submit_with_attachments("see attached", [image_attachment])

        assert all(str(r.url) != FEEDBACK_ENDPOINT for r in handler.requests)
