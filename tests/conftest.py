"""YapKit 测试 fixtures -- 配置、附件样本、httpx MockTransport 录制器"""

import io
import json
from collections.abc import AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from PIL import Image
from pydantic import SecretStr
from yapkit.config import FeedbackConfig
from yapkit.models import Attachment, DeviceInfo
from yapkit.transport import HttpxTransport

BASE_URL = "https://api.example.com"
UPLOAD_URL_ENDPOINT = f"{BASE_URL}/api/feedback/upload-url"
FEEDBACK_ENDPOINT = f"{BASE_URL}/api/feedback"
API_KEY = "yb_live_test123"


def make_image_bytes(width: int = 4, height: int = 3, fmt: str = "PNG", **save_kwargs) -> bytes:
    """用 Pillow 生成一张真实的小图片"""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), "red").save(buffer, format=fmt, **save_kwargs)
    return buffer.getvalue()


def json_response(status_code: int, body) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(body).encode())


def slot_response(count: int, host: str = "https://storage.example.com") -> httpx.Response:
    """构造 upload-url 成功响应，slot[i] 的路径为 feedback/file-<i>"""
    return json_response(
        200,
        {
            "success": True,
            "uploadUrls": [
                {
                    "storagePath": f"feedback/file-{i}",
                    "signedUrl": f"{host}/upload/file-{i}?token=t{i}",
                    "token": f"t{i}",
                }
                for i in range(count)
            ],
            "limits": {
                "maxImageSize": 10 * 1024 * 1024,
                "maxVideoSize": 50 * 1024 * 1024,
                "maxVideoDuration": 60,
                "maxAttachments": 5,
            },
        },
    )


Route = httpx.Response | Callable[[httpx.Request], httpx.Response]


class RecordingHandler:
    """httpx.MockTransport 处理器：按 (method, url) 返回预设响应并按序记录请求

    未注册的 PUT 请求默认返回 200。
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], Route] = {}

    def add(self, method: str, url: str, route: Route) -> None:
        self._routes[(method, url)] = route

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get((request.method, str(request.url)))
        if route is None:
            if request.method == "PUT":
                return httpx.Response(200)
            return httpx.Response(404)
        if callable(route):
            return route(request)
        return route

    def requests_for(self, method: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method]


@pytest.fixture
def config() -> FeedbackConfig:
    return FeedbackConfig(api_key=SecretStr(API_KEY), api_base_url=BASE_URL)


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest_asyncio.fixture
async def transport(handler: RecordingHandler) -> AsyncGenerator[HttpxTransport, None]:
    """注入 MockTransport 的 HttpxTransport"""
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        yield HttpxTransport(client=client)


@pytest.fixture
def device_info() -> DeviceInfo:
    return DeviceInfo(
        model="iPhone15,2",
        os_version="iOS 17.4",
        app_version="1.2.3",
        build_number="42",
        locale="en_GB",
    )


@pytest.fixture
def image_attachment() -> Attachment:
    return Attachment.from_image(
        data=make_image_bytes(),
        file_name="screenshot.png",
        mime_type="image/png",
        width=4,
        height=3,
    )


@pytest.fixture
def video_attachment() -> Attachment:
    return Attachment.from_video(
        data=b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 256,
        file_name="recording.mp4",
        mime_type="video/mp4",
        width=1920,
        height=1080,
        duration_seconds=12.5,
    )
