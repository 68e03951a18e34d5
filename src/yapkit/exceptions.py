"""YapKit 异常体系

四个异常族：附件校验、视频探测、附件上传、反馈提交。
所有异常的 str() 即面向用户的可读描述，上下文字段作为属性保留。
"""


class YapKitError(Exception):
    """YapKit 基础异常"""


# ---------------------------------------------------------------------------
# 附件校验（纯本地，不涉及网络）
# ---------------------------------------------------------------------------


class AttachmentValidationError(YapKitError):
    """附件校验失败基类"""


class TooManyAttachmentsError(AttachmentValidationError):
    def __init__(self, max_count: int) -> None:
        super().__init__(f"Maximum {max_count} attachments allowed.")
        self.max_count = max_count


class UnsupportedFileTypeError(AttachmentValidationError):
    def __init__(self, file_name: str, mime_type: str) -> None:
        super().__init__(f'"{file_name}" has an unsupported file type ({mime_type}).')
        self.file_name = file_name
        self.mime_type = mime_type


class FileTooLargeError(AttachmentValidationError):
    """文件超出大小限制，描述中以 MB 展示上限"""

    def __init__(self, file_name: str, max_size: int) -> None:
        max_mb = max_size // (1024 * 1024)
        super().__init__(f'"{file_name}" exceeds the maximum size of {max_mb} MB.')
        self.file_name = file_name
        self.max_size = max_size


class VideoDurationTooLongError(AttachmentValidationError):
    """视频时长超限，或视频缺少时长信息"""

    def __init__(self, file_name: str, max_duration: int) -> None:
        super().__init__(
            f'"{file_name}" exceeds the maximum duration of {max_duration} seconds.'
        )
        self.file_name = file_name
        self.max_duration = max_duration


# ---------------------------------------------------------------------------
# 视频探测（提取元数据阶段）
# ---------------------------------------------------------------------------


class VideoValidationError(YapKitError):
    """视频探测失败基类"""


class InvalidVideoError(VideoValidationError):
    def __init__(self) -> None:
        super().__init__("The selected file is not a valid video.")


class CouldNotLoadAssetError(VideoValidationError):
    def __init__(self, reason: str = "") -> None:
        super().__init__("Could not load video for validation.")
        self.reason = reason


class DurationTooLongError(VideoValidationError):
    def __init__(self, duration: float, max_duration: float) -> None:
        super().__init__(
            f"Video duration ({int(duration)}s) exceeds maximum ({int(max_duration)}s)."
        )
        self.duration = duration
        self.max_duration = max_duration


# ---------------------------------------------------------------------------
# 附件上传
# ---------------------------------------------------------------------------


class AttachmentUploadError(YapKitError):
    """附件上传失败基类"""


class FailedToGetUploadUrlsError(AttachmentUploadError):
    """申请上传 slot 失败

    detail 为服务端返回的 error 字段；无法解码时为 "HTTP <status>" 或 "Invalid response"。
    """

    def __init__(self, detail: str) -> None:
        super().__init__(f"Failed to get upload URLs: {detail}")
        self.detail = detail


class UploadFailedError(AttachmentUploadError):
    """单个文件 PUT 失败；status_code 为 0 表示没有拿到 HTTP 响应"""

    def __init__(self, file_name: str, status_code: int) -> None:
        super().__init__(f'Failed to upload "{file_name}" (HTTP {status_code}).')
        self.file_name = file_name
        self.status_code = status_code


class UploadNetworkError(UploadFailedError):
    """文件上传过程中的传输层错误（连接失败、超时等）"""

    def __init__(self, file_name: str, original_error: Exception) -> None:
        super().__init__(file_name, status_code=0)
        self.args = (f'Network error while uploading "{file_name}": {original_error}',)
        self.original_error = original_error


# ---------------------------------------------------------------------------
# 反馈提交
# ---------------------------------------------------------------------------


class FeedbackError(YapKitError):
    """反馈提交失败基类"""


class InvalidResponseError(FeedbackError):
    def __init__(self) -> None:
        super().__init__("Received an invalid response from the server.")


class HttpError(FeedbackError):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"Server returned an error (HTTP {status_code}).")
        self.status_code = status_code


class ServerError(FeedbackError):
    """服务端返回的 {error: ...}，描述即服务端消息原文"""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DecodingError(FeedbackError):
    def __init__(self, original_error: Exception | None = None) -> None:
        super().__init__("Failed to process the server response.")
        self.original_error = original_error


class FeedbackNetworkError(FeedbackError):
    def __init__(self, original_error: Exception) -> None:
        super().__init__(f"Network error: {original_error}")
        self.original_error = original_error
