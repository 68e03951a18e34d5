"""附件构造 -- 从原始图片字节或视频文件生成 Attachment

供宿主 UI（文件选择器）在拿到原始数据后调用。
视频先探测再读取完整字节：时长/大小超限时不会把大文件读入内存。
"""

import uuid
from pathlib import Path

import structlog

from .exceptions import FileTooLargeError, VideoDurationTooLongError
from .limits import DEFAULT_LIMITS, AttachmentLimits
from .media.image import detect_image_metadata, extension_for_mime_type
from .media.protocols import ImageDecoder
from .media.video import VideoValidator, mime_type_for_extension
from .models import Attachment

log = structlog.get_logger()


def load_image_attachment(
    data: bytes,
    limits: AttachmentLimits = DEFAULT_LIMITS,
    decoder: ImageDecoder | None = None,
) -> Attachment:
    """从图片字节构造附件

    文件名为 "<uuid>.<ext>"，扩展名由识别出的 MIME 类型决定。

    Raises:
        FileTooLargeError: 超出图片大小上限（文件名记为 "image"）
    """
    if len(data) > limits.max_image_size:
        raise FileTooLargeError("image", limits.max_image_size)

    metadata = detect_image_metadata(data, decoder=decoder)
    file_name = f"{uuid.uuid4()}.{extension_for_mime_type(metadata.mime_type)}"

    log.debug(
        "image_attachment_loaded",
        file_name=file_name,
        mime_type=metadata.mime_type,
        file_size=len(data),
    )

    return Attachment.from_image(
        data=data,
        file_name=file_name,
        mime_type=metadata.mime_type,
        width=metadata.width,
        height=metadata.height,
    )


async def load_video_attachment(
    path: Path | str,
    validator: VideoValidator | None = None,
    limits: AttachmentLimits = DEFAULT_LIMITS,
) -> Attachment:
    """从视频文件构造附件

    流程: 探测元数据（时长门槛） -> 时长/大小校验 -> 读取字节。

    Raises:
        VideoValidationError: 探测失败或时长超限
        VideoDurationTooLongError: 时长超过策略上限
        FileTooLargeError: 超出视频大小上限
    """
    path = Path(path)
    validator = validator or VideoValidator(max_duration=limits.max_video_duration)
    metadata = await validator.validate(path)

    if metadata.duration > limits.max_video_duration:
        raise VideoDurationTooLongError(path.name, limits.max_video_duration)

    if metadata.file_size > limits.max_video_size:
        raise FileTooLargeError(path.name, limits.max_video_size)

    data = path.read_bytes()
    mime_type = mime_type_for_extension(path.suffix)

    log.debug(
        "video_attachment_loaded",
        file_name=path.name,
        mime_type=mime_type,
        duration=metadata.duration,
        file_size=len(data),
    )

    return Attachment.from_video(
        data=data,
        file_name=path.name,
        mime_type=mime_type,
        width=metadata.width,
        height=metadata.height,
        duration_seconds=metadata.duration,
    )
