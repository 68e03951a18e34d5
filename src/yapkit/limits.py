"""AttachmentLimits -- 附件校验策略

数量、MIME 白名单、大小、视频时长四类规则，按固定顺序检查，首个违规即抛出。
纯函数，不涉及 I/O，所有检查都在任何网络调用之前完成。
"""

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import (
    FileTooLargeError,
    TooManyAttachmentsError,
    UnsupportedFileTypeError,
    VideoDurationTooLongError,
)
from .models import Attachment

MB = 1024 * 1024


class AttachmentLimits(BaseModel):
    """附件限制策略（不可变）"""

    model_config = ConfigDict(frozen=True)

    max_image_size: int = Field(default=10 * MB, gt=0, description="图片最大字节数")
    max_video_size: int = Field(default=50 * MB, gt=0, description="视频最大字节数")
    max_video_duration: int = Field(default=60, gt=0, description="视频最大时长（秒）")
    max_attachments: int = Field(default=5, ge=0, description="单次反馈最多附件数")
    allowed_image_types: tuple[str, ...] = (
        "image/jpeg",
        "image/png",
        "image/heic",
        "image/webp",
    )
    allowed_video_types: tuple[str, ...] = (
        "video/mp4",
        "video/quicktime",
        "video/webm",
    )

    @property
    def allowed_mime_types(self) -> tuple[str, ...]:
        return self.allowed_image_types + self.allowed_video_types

    def max_size_for(self, attachment: Attachment) -> int:
        """视频使用视频上限，其余一律使用图片上限"""
        return self.max_video_size if attachment.is_video else self.max_image_size


DEFAULT_LIMITS = AttachmentLimits()


def validate_attachments(
    attachments: Sequence[Attachment],
    limits: AttachmentLimits = DEFAULT_LIMITS,
) -> None:
    """校验附件列表

    检查顺序:
        1. 数量超限 -> TooManyAttachmentsError
        2. 逐个附件（按输入顺序）:
           a. MIME 不在白名单 -> UnsupportedFileTypeError
           b. 超出对应类型的大小上限 -> FileTooLargeError
           c. 视频缺少时长或时长超限 -> VideoDurationTooLongError

    Raises:
        AttachmentValidationError 的对应子类
    """
    if len(attachments) > limits.max_attachments:
        raise TooManyAttachmentsError(limits.max_attachments)

    allowed = limits.allowed_mime_types
    for attachment in attachments:
        if attachment.mime_type not in allowed:
            raise UnsupportedFileTypeError(attachment.file_name, attachment.mime_type)

        max_size = limits.max_size_for(attachment)
        if attachment.file_size > max_size:
            raise FileTooLargeError(attachment.file_name, max_size)

        if attachment.is_video:
            duration = attachment.duration_seconds
            if duration is None or duration > limits.max_video_duration:
                raise VideoDurationTooLongError(
                    attachment.file_name,
                    limits.max_video_duration,
                )
