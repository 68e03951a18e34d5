"""YapKit -- 用户反馈采集 SDK

组装反馈内容、校验媒体附件、两阶段上传（申请签名 slot -> 直传存储），
最后提交带附件描述的反馈记录。
"""

# 配置
from .config import FeedbackConfig, load_feedback_config
from .device import collect_device_info

# 异常
from .exceptions import (
    AttachmentUploadError,
    AttachmentValidationError,
    CouldNotLoadAssetError,
    DecodingError,
    DurationTooLongError,
    FailedToGetUploadUrlsError,
    FeedbackError,
    FeedbackNetworkError,
    FileTooLargeError,
    HttpError,
    InvalidResponseError,
    InvalidVideoError,
    ServerError,
    TooManyAttachmentsError,
    UnsupportedFileTypeError,
    UploadFailedError,
    UploadNetworkError,
    VideoDurationTooLongError,
    VideoValidationError,
    YapKitError,
)
from .limits import DEFAULT_LIMITS, AttachmentLimits, validate_attachments
from .loader import load_image_attachment, load_video_attachment
from .media import VideoMetadata, VideoValidator, detect_image_metadata

# 数据模型
from .models import (
    Attachment,
    AttachmentSubmission,
    DeviceInfo,
    FeedbackResponse,
    FeedbackType,
    UploadProgress,
    UploadSlot,
)

# 核心组件
from .service import FeedbackService
from .transport import HttpxTransport, Transport
from .uploader import AttachmentUploader, ProgressHandler

__all__ = [
    "FeedbackConfig",
    "load_feedback_config",
    "collect_device_info",
    "Attachment",
    "AttachmentSubmission",
    "DeviceInfo",
    "FeedbackResponse",
    "FeedbackType",
    "UploadProgress",
    "UploadSlot",
    "AttachmentLimits",
    "DEFAULT_LIMITS",
    "validate_attachments",
    "load_image_attachment",
    "load_video_attachment",
    "detect_image_metadata",
    "VideoMetadata",
    "VideoValidator",
    "FeedbackService",
    "AttachmentUploader",
    "ProgressHandler",
    "Transport",
    "HttpxTransport",
    "YapKitError",
    "AttachmentValidationError",
    "TooManyAttachmentsError",
    "UnsupportedFileTypeError",
    "FileTooLargeError",
    "VideoDurationTooLongError",
    "VideoValidationError",
    "InvalidVideoError",
    "CouldNotLoadAssetError",
    "DurationTooLongError",
    "AttachmentUploadError",
    "FailedToGetUploadUrlsError",
    "UploadFailedError",
    "UploadNetworkError",
    "FeedbackError",
    "InvalidResponseError",
    "HttpError",
    "ServerError",
    "DecodingError",
    "FeedbackNetworkError",
]
