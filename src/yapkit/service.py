"""FeedbackService -- 反馈提交客户端

POST {base}/api/feedback，Bearer 认证，JSON 请求体。
message 按调用方给定的内容原样发送（去空白与非空校验由调用方负责）。
"""

from collections.abc import Callable, Sequence

import httpx
import structlog
from pydantic import ValidationError

from .config import FeedbackConfig
from .device import collect_device_info
from .exceptions import (
    DecodingError,
    FeedbackNetworkError,
    HttpError,
    InvalidResponseError,
    ServerError,
)
from .models import (
    Attachment,
    AttachmentSubmission,
    DeviceInfo,
    FeedbackPayload,
    FeedbackResponse,
    FeedbackType,
)
from .transport import HttpxTransport, Transport, decode_error_message, is_success
from .uploader import AttachmentUploader, ProgressHandler

log = structlog.get_logger()

DeviceInfoProvider = Callable[[], DeviceInfo]


class FeedbackService:
    """反馈提交服务

    配置与传输在构造后只读，同一实例可被并发调用。
    """

    def __init__(
        self,
        config: FeedbackConfig,
        transport: Transport | None = None,
        device_info_provider: DeviceInfoProvider = collect_device_info,
        uploader: AttachmentUploader | None = None,
    ) -> None:
        """
        Args:
            config: 反馈 API 配置
            transport: HTTP 传输，None 时使用 HttpxTransport
            device_info_provider: 未传入 device_info 时用于获取设备快照
            uploader: 附件上传器，None 时基于相同 config/transport 创建
        """
        self._config = config
        self._transport = transport or HttpxTransport(timeout_s=config.timeout_s)
        self._device_info_provider = device_info_provider
        self._uploader = uploader or AttachmentUploader(config, transport=self._transport)

    async def submit(
        self,
        message: str,
        *,
        feedback_type: FeedbackType | None = None,
        email: str | None = None,
        device_info: DeviceInfo | None = None,
        attachments: Sequence[AttachmentSubmission] | None = None,
    ) -> FeedbackResponse:
        """提交反馈

        Args:
            message: 反馈内容
            feedback_type: 反馈类型，None 时请求中不出现 type 字段
            email: 联系邮箱（私下保存，不会公开到 GitHub）
            device_info: 设备信息，None 时由 device_info_provider 提供
            attachments: 已上传附件的描述，为空时请求中不出现 attachments 字段

        Returns:
            FeedbackResponse

        Raises:
            InvalidResponseError: 未得到格式正确的 HTTP 响应
            ServerError: 非 2xx 且响应体含 {error: ...}
            HttpError: 非 2xx 且响应体无法解码
            DecodingError: 2xx 但响应体不符合预期结构
            FeedbackNetworkError: 传输层错误
        """
        payload = FeedbackPayload(
            type=feedback_type,
            message=message,
            email=email,
            device_info=device_info or self._device_info_provider(),
            attachments=list(attachments) if attachments else None,
        )

        try:
            response = await self._transport.request(
                "POST",
                self._config.feedback_url,
                headers=self._config.auth_headers(),
                content=payload.to_json_bytes(),
            )
        except httpx.ProtocolError as e:
            log.error("feedback_submit_failed", error=str(e), error_type=type(e).__name__)
            raise InvalidResponseError() from e
        except (httpx.TransportError, httpx.InvalidURL) as e:
            log.error("feedback_submit_failed", error=str(e), error_type=type(e).__name__)
            raise FeedbackNetworkError(e) from e

        if not is_success(response):
            server_message = decode_error_message(response)
            log.error(
                "feedback_rejected",
                status_code=response.status_code,
                server_message=server_message,
            )
            if server_message is not None:
                raise ServerError(server_message)
            raise HttpError(response.status_code)

        try:
            result = FeedbackResponse.model_validate_json(response.content)
        except ValidationError as e:
            log.error("feedback_response_decode_failed", error=str(e))
            raise DecodingError(e) from e

        log.info(
            "feedback_submitted",
            feedback_id=result.feedback_id,
            github_issue=result.github_issue,
            attachment_count=len(payload.attachments or []),
        )
        return result

    async def submit_with_attachments(
        self,
        message: str,
        attachments: Sequence[Attachment],
        *,
        feedback_type: FeedbackType | None = None,
        email: str | None = None,
        device_info: DeviceInfo | None = None,
        progress_handler: ProgressHandler | None = None,
    ) -> FeedbackResponse:
        """先上传附件，再提交带附件描述的反馈

        上传阶段的异常（校验/申请 slot/上传）原样抛出，此时不会发起提交。
        """
        submissions = await self._uploader.upload(attachments, progress_handler=progress_handler)
        return await self.submit(
            message,
            feedback_type=feedback_type,
            email=email,
            device_info=device_info,
            attachments=submissions,
        )
