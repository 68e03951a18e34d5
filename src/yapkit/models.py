"""数据模型 -- 附件、上传 slot、上传进度、反馈请求/响应

线上格式统一为 camelCase（alias），Python 侧字段为 snake_case。
可选字段为 None 时序列化中省略（exclude_none）。
"""

import math
from enum import StrEnum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """线上 JSON 模型基类：camelCase alias，支持按字段名构造"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict:
        """序列化为请求体 dict（camelCase，省略 None）"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json_bytes(self) -> bytes:
        """序列化为 JSON 请求体字节"""
        return self.model_dump_json(by_alias=True, exclude_none=True).encode()


class FeedbackType(StrEnum):
    """反馈类型（线上取值）"""

    INCORRECT_BEHAVIOR = "incorrect_behavior"
    CRASH = "crash"
    SLOW_UNRESPONSIVE = "slow_unresponsive"
    SUGGESTION = "suggestion"


class DeviceInfo(WireModel):
    """设备与宿主应用元数据，随每条反馈提交"""

    model: str = Field(description="设备型号标识（如 iPhone15,2 / x86_64）")
    os_version: str = Field(description="操作系统名称与版本")
    app_version: str = Field(description="宿主应用版本号")
    build_number: str = Field(description="宿主应用构建号")
    locale: str = Field(description="区域标识（如 en_GB）")


# ---------------------------------------------------------------------------
# 附件
# ---------------------------------------------------------------------------


class Attachment(BaseModel):
    """待上传的单个媒体文件

    由 from_image() / from_video() 两条路径之一构造，构造后不可变。
    id 仅用于客户端追踪，服务端以 storage_path 作为存储标识。
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="客户端追踪 ID")
    data: bytes = Field(repr=False, description="原始文件字节")
    file_name: str = Field(description="展示用文件名")
    mime_type: str = Field(description="MIME 类型（如 image/png）")
    width: int | None = Field(default=None, ge=0, description="宽度（像素）")
    height: int | None = Field(default=None, ge=0, description="高度（像素）")
    duration_seconds: float | None = Field(
        default=None,
        description="视频时长（秒），仅视频附件有值",
    )

    @model_validator(mode="after")
    def check_duration(self) -> "Attachment":
        if self.duration_seconds is not None and (
            not math.isfinite(self.duration_seconds) or self.duration_seconds < 0
        ):
            raise ValueError("duration_seconds must be a finite, non-negative number")
        return self

    @classmethod
    def from_image(
        cls,
        data: bytes,
        file_name: str,
        mime_type: str,
        width: int,
        height: int,
        id: UUID | None = None,
    ) -> "Attachment":
        """从图片字节构造附件（无时长）"""
        return cls(
            id=id or uuid4(),
            data=data,
            file_name=file_name,
            mime_type=mime_type,
            width=width,
            height=height,
        )

    @classmethod
    def from_video(
        cls,
        data: bytes,
        file_name: str,
        mime_type: str,
        width: int,
        height: int,
        duration_seconds: float,
        id: UUID | None = None,
    ) -> "Attachment":
        """从视频字节构造附件（必须携带时长）"""
        return cls(
            id=id or uuid4(),
            data=data,
            file_name=file_name,
            mime_type=mime_type,
            width=width,
            height=height,
            duration_seconds=duration_seconds,
        )

    @property
    def file_size(self) -> int:
        """文件大小（字节）"""
        return len(self.data)

    @property
    def is_video(self) -> bool:
        return self.mime_type.startswith("video/")

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


class AttachmentUploadRequest(WireModel):
    """申请上传 slot 时描述单个附件"""

    file_name: str
    file_size: int
    mime_type: str
    width: int | None = None
    height: int | None = None
    duration_seconds: float | None = None

    @classmethod
    def from_attachment(cls, attachment: Attachment) -> "AttachmentUploadRequest":
        return cls(
            file_name=attachment.file_name,
            file_size=attachment.file_size,
            mime_type=attachment.mime_type,
            width=attachment.width,
            height=attachment.height,
            duration_seconds=attachment.duration_seconds,
        )


class AttachmentSubmission(WireModel):
    """上传完成后随反馈提交的附件描述（storage_path 替代原始字节）"""

    storage_path: str = Field(description="服务端分配的存储路径")
    file_name: str
    file_size: int
    mime_type: str
    width: int | None = None
    height: int | None = None
    duration_seconds: float | None = None

    @classmethod
    def from_attachment(
        cls,
        attachment: Attachment,
        storage_path: str,
    ) -> "AttachmentSubmission":
        return cls(
            storage_path=storage_path,
            file_name=attachment.file_name,
            file_size=attachment.file_size,
            mime_type=attachment.mime_type,
            width=attachment.width,
            height=attachment.height,
            duration_seconds=attachment.duration_seconds,
        )


# ---------------------------------------------------------------------------
# 上传 slot 协议
# ---------------------------------------------------------------------------


class UploadUrlRequest(WireModel):
    """POST api/feedback/upload-url 请求体"""

    attachments: list[AttachmentUploadRequest]


class UploadSlot(WireModel):
    """服务端签发的一次性上传目标，与请求中的附件按位置一一对应"""

    storage_path: str
    signed_url: str
    token: str


class UploadLimits(WireModel):
    """服务端公布的附件限制（仅记录，本地校验以客户端策略为准）"""

    max_image_size: int
    max_video_size: int
    max_video_duration: int
    max_attachments: int


class UploadUrlResponse(WireModel):
    success: bool
    upload_urls: list[UploadSlot]
    limits: UploadLimits | None = None


class UploadProgress(BaseModel):
    """上传进度快照

    每个附件在开始（bytes_uploaded=0）和完成（bytes_uploaded=total_bytes）时各发出一次。
    """

    model_config = ConfigDict(frozen=True)

    attachment_index: int = Field(ge=0, description="当前附件下标（0 起）")
    total_attachments: int = Field(ge=1, description="附件总数")
    bytes_uploaded: int = Field(ge=0, description="当前附件已上传字节数")
    total_bytes: int = Field(ge=0, description="当前附件总字节数")

    @property
    def current_attachment_progress(self) -> float:
        """当前附件进度（0.0 ~ 1.0）"""
        if self.total_bytes <= 0:
            return 0.0
        return self.bytes_uploaded / self.total_bytes

    @property
    def overall_progress(self) -> float:
        """全部附件的整体进度（0.0 ~ 1.0）"""
        completed = float(self.attachment_index)
        return (completed + self.current_attachment_progress) / self.total_attachments


# ---------------------------------------------------------------------------
# 反馈提交
# ---------------------------------------------------------------------------


class FeedbackPayload(WireModel):
    """POST api/feedback 请求体；attachments 为 None 时不出现在请求中"""

    type: FeedbackType | None = None
    message: str
    email: str | None = None
    device_info: DeviceInfo
    attachments: list[AttachmentSubmission] | None = None


class FeedbackResponse(WireModel):
    """反馈提交成功的响应"""

    success: bool
    feedback_id: str = Field(description="服务端分配的反馈 ID")
    github_issue: str | None = Field(
        default=None,
        description="自动创建的 GitHub issue URL（未创建时为 None）",
    )


class ErrorResponse(WireModel):
    """非 2xx 响应体 {error: ...}"""

    error: str
