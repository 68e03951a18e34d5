"""AttachmentUploader -- 两阶段附件上传

1. 一次批量请求向后端申请签名上传 slot（POST api/feedback/upload-url）
2. 按输入顺序逐个 PUT 原始字节到 slot 的签名 URL（串行，不并发）

任何一个文件失败则整批失败，不返回部分结果，也不删除已上传的文件。
每次 upload() 调用的状态均为局部变量，同一个 uploader 可被并发调用。
"""

from collections.abc import Callable, Sequence

import httpx
import structlog
from pydantic import ValidationError

from .config import FeedbackConfig
from .exceptions import (
    FailedToGetUploadUrlsError,
    UploadFailedError,
    UploadNetworkError,
)
from .limits import DEFAULT_LIMITS, AttachmentLimits, validate_attachments
from .models import (
    Attachment,
    AttachmentSubmission,
    AttachmentUploadRequest,
    UploadProgress,
    UploadSlot,
    UploadUrlRequest,
    UploadUrlResponse,
)
from .transport import HttpxTransport, Transport, decode_error_message, is_success

log = structlog.get_logger()

INVALID_RESPONSE_DETAIL = "Invalid response"

# 进度回调：在上传协程中同步调用，不保证运行在任何特定线程/事件循环上，
# UI 消费方需自行切换到渲染上下文
ProgressHandler = Callable[[UploadProgress], None]


class AttachmentUploader:
    """附件上传编排器"""

    def __init__(
        self,
        config: FeedbackConfig,
        transport: Transport | None = None,
        limits: AttachmentLimits = DEFAULT_LIMITS,
    ) -> None:
        """
        Args:
            config: 反馈 API 配置
            transport: HTTP 传输，None 时使用 HttpxTransport
            limits: 本地校验策略
        """
        self._config = config
        self._transport = transport or HttpxTransport(timeout_s=config.timeout_s)
        self._limits = limits

    async def upload(
        self,
        attachments: Sequence[Attachment],
        progress_handler: ProgressHandler | None = None,
    ) -> list[AttachmentSubmission]:
        """上传附件并返回用于反馈提交的附件描述

        行为:
            1. 空列表直接返回 []（无网络请求、无进度事件）
            2. 本地校验，校验异常原样抛出
            3. 批量申请上传 slot，slot[i] 对应 attachments[i]
            4. 逐个上传：开始与完成时各发出一次进度事件

        Returns:
            与输入同序的 AttachmentSubmission 列表

        Raises:
            AttachmentValidationError: 本地校验失败
            FailedToGetUploadUrlsError: 申请 slot 失败
            UploadFailedError: 某个文件上传失败（含 UploadNetworkError）
        """
        if not attachments:
            return []

        validate_attachments(attachments, self._limits)

        slots = await self._request_upload_slots(attachments)

        total = len(attachments)
        submissions: list[AttachmentSubmission] = []

        for index, (attachment, slot) in enumerate(zip(attachments, slots, strict=True)):
            if progress_handler is not None:
                progress_handler(
                    UploadProgress(
                        attachment_index=index,
                        total_attachments=total,
                        bytes_uploaded=0,
                        total_bytes=attachment.file_size,
                    )
                )

            await self._upload_file(attachment, slot)

            if progress_handler is not None:
                progress_handler(
                    UploadProgress(
                        attachment_index=index,
                        total_attachments=total,
                        bytes_uploaded=attachment.file_size,
                        total_bytes=attachment.file_size,
                    )
                )

            submissions.append(AttachmentSubmission.from_attachment(attachment, slot.storage_path))

        log.info("attachments_uploaded", count=total)
        return submissions

    async def _request_upload_slots(self, attachments: Sequence[Attachment]) -> list[UploadSlot]:
        """批量申请签名上传 slot"""
        body = UploadUrlRequest(
            attachments=[AttachmentUploadRequest.from_attachment(a) for a in attachments]
        )

        try:
            response = await self._transport.request(
                "POST",
                self._config.upload_url_endpoint,
                headers=self._config.auth_headers(),
                content=body.to_json_bytes(),
            )
        except httpx.ProtocolError as e:
            log.error("upload_urls_request_failed", error=str(e), error_type=type(e).__name__)
            raise FailedToGetUploadUrlsError(INVALID_RESPONSE_DETAIL) from e
        except (httpx.TransportError, httpx.InvalidURL) as e:
            log.error("upload_urls_request_failed", error=str(e), error_type=type(e).__name__)
            raise FailedToGetUploadUrlsError(str(e) or type(e).__name__) from e

        if not is_success(response):
            detail = decode_error_message(response) or f"HTTP {response.status_code}"
            log.error(
                "upload_urls_rejected",
                status_code=response.status_code,
                detail=detail,
            )
            raise FailedToGetUploadUrlsError(detail)

        try:
            parsed = UploadUrlResponse.model_validate_json(response.content)
        except ValidationError as e:
            log.error("upload_urls_decode_failed", error=str(e))
            raise FailedToGetUploadUrlsError(INVALID_RESPONSE_DETAIL) from e

        if len(parsed.upload_urls) != len(attachments):
            log.error(
                "upload_urls_count_mismatch",
                expected=len(attachments),
                received=len(parsed.upload_urls),
            )
            raise FailedToGetUploadUrlsError(INVALID_RESPONSE_DETAIL)

        log.debug(
            "upload_urls_received",
            count=len(parsed.upload_urls),
            server_limits=parsed.limits.model_dump() if parsed.limits else None,
        )
        return parsed.upload_urls

    async def _upload_file(self, attachment: Attachment, slot: UploadSlot) -> None:
        """PUT 原始字节到签名 URL，URL 原样使用"""
        file_name = attachment.file_name

        try:
            url = httpx.URL(slot.signed_url)
        except httpx.InvalidURL as e:
            raise UploadFailedError(file_name, status_code=0) from e
        if url.scheme not in ("http", "https") or not url.host:
            raise UploadFailedError(file_name, status_code=0)

        try:
            response = await self._transport.request(
                "PUT",
                slot.signed_url,
                headers={"Content-Type": attachment.mime_type},
                content=attachment.data,
            )
        except httpx.InvalidURL as e:
            raise UploadFailedError(file_name, status_code=0) from e
        except httpx.TransportError as e:
            log.error(
                "attachment_upload_failed",
                file_name=file_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise UploadNetworkError(file_name, e) from e

        if not is_success(response):
            log.error(
                "attachment_upload_rejected",
                file_name=file_name,
                status_code=response.status_code,
            )
            raise UploadFailedError(file_name, status_code=response.status_code)

        log.debug(
            "attachment_uploaded",
            file_name=file_name,
            storage_path=slot.storage_path,
            file_size=attachment.file_size,
        )
