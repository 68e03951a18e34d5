"""VideoValidator -- 视频元数据探测与时长校验

探测本身委托给 VideoProber（默认 FfprobeVideoProber，调用系统 ffprobe），
VideoValidator 在探测结果之上执行约束：
- 时长必须是有限非负数，否则 InvalidVideoError
- 时长超过上限 -> DurationTooLongError（读取完整文件前尽早失败）
- 宽高与文件大小尽力而为，缺失时为 0
"""

import asyncio
import json
import math
import os
import tempfile
from pathlib import Path

import structlog
from pydantic import BaseModel, Field

from ..exceptions import (
    CouldNotLoadAssetError,
    DurationTooLongError,
    InvalidVideoError,
    VideoValidationError,
)
from ..limits import DEFAULT_LIMITS
from .protocols import VideoProber, VideoProbeResult

log = structlog.get_logger()

DEFAULT_VIDEO_MIME_TYPE = "video/mp4"

_EXTENSION_TO_MIME = {
    "mp4": "video/mp4",
    "m4v": "video/mp4",
    "mov": "video/quicktime",
    "webm": "video/webm",
}

_MIME_TO_EXTENSION = {
    "video/mp4": "mp4",
    "video/quicktime": "mov",
    "video/webm": "webm",
}


class VideoMetadata(BaseModel):
    """校验通过的视频元数据"""

    duration: float = Field(ge=0, description="时长（秒）")
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)
    file_size: int = Field(default=0, ge=0, description="文件大小（字节）")


def mime_type_for_extension(extension: str) -> str:
    """视频扩展名 -> MIME 类型，未知扩展名按 video/mp4 处理"""
    return _EXTENSION_TO_MIME.get(extension.lower().lstrip("."), DEFAULT_VIDEO_MIME_TYPE)


def extension_for_video_mime_type(mime_type: str) -> str:
    return _MIME_TO_EXTENSION.get(mime_type, "mp4")


def _parse_float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _parse_int(value) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _stream_rotation(stream: dict) -> int:
    """读取视频流的显示旋转角度（tags.rotate 或 side_data_list.rotation）"""
    rotation = _parse_int(stream.get("tags", {}).get("rotate"))
    if rotation is None:
        for side_data in stream.get("side_data_list", []):
            rotation = _parse_int(side_data.get("rotation"))
            if rotation is not None:
                break
    return rotation or 0


class FfprobeVideoProber:
    """基于 ffprobe 子进程的视频探测器"""

    def __init__(self, ffprobe_path: str = "ffprobe", timeout_s: float = 30.0) -> None:
        self._ffprobe_path = ffprobe_path
        self._timeout_s = timeout_s

    async def probe(self, path: Path) -> VideoProbeResult:
        cmd = [
            self._ffprobe_path,
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_format",
            "-show_streams",
            str(path),
        ]
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise CouldNotLoadAssetError(f"ffprobe unavailable: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), self._timeout_s)
        except TimeoutError as e:
            raise CouldNotLoadAssetError("ffprobe timed out") from e
        finally:
            # 超时或任务被取消时子进程仍在运行
            if proc.returncode is None:
                proc.kill()
                await proc.wait()

        if proc.returncode != 0:
            raise CouldNotLoadAssetError(stderr.decode(errors="replace").strip())

        try:
            info = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise CouldNotLoadAssetError("ffprobe returned invalid JSON") from e

        fmt = info.get("format", {})
        video_stream = next(
            (s for s in info.get("streams", []) if s.get("codec_type") == "video"),
            {},
        )

        duration = _parse_float(fmt.get("duration"))
        if math.isnan(duration):
            duration = _parse_float(video_stream.get("duration"))

        width = _parse_int(video_stream.get("width"))
        height = _parse_int(video_stream.get("height"))
        if abs(_stream_rotation(video_stream)) % 180 == 90:
            width, height = height, width

        file_size = _parse_int(fmt.get("size"))
        if file_size is None:
            try:
                file_size = path.stat().st_size
            except OSError:
                file_size = None

        return VideoProbeResult(
            duration_seconds=duration,
            width=width,
            height=height,
            file_size=file_size,
        )


class VideoValidator:
    """视频校验器"""

    def __init__(
        self,
        max_duration: float = DEFAULT_LIMITS.max_video_duration,
        prober: VideoProber | None = None,
    ) -> None:
        """
        Args:
            max_duration: 允许的最大时长（秒），默认 60
            prober: 视频探测器，None 时使用 FfprobeVideoProber
        """
        self._max_duration = float(max_duration)
        self._prober = prober or FfprobeVideoProber()

    @property
    def max_duration(self) -> float:
        return self._max_duration

    async def validate(self, path: Path | str) -> VideoMetadata:
        """校验指定路径的视频文件

        Raises:
            CouldNotLoadAssetError: 探测器无法加载视频
            InvalidVideoError: 时长不是有限非负数
            DurationTooLongError: 时长超过上限
        """
        path = Path(path)
        try:
            result = await self._prober.probe(path)
        except VideoValidationError:
            raise
        except Exception as e:
            log.warning(
                "video_probe_failed",
                path=str(path),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise CouldNotLoadAssetError(str(e)) from e

        duration = result.duration_seconds
        if not math.isfinite(duration) or duration < 0:
            raise InvalidVideoError()

        if duration > self._max_duration:
            raise DurationTooLongError(duration, self._max_duration)

        return VideoMetadata(
            duration=duration,
            width=max(result.width or 0, 0),
            height=max(result.height or 0, 0),
            file_size=max(result.file_size or 0, 0),
        )

    async def validate_data(self, data: bytes, mime_type: str) -> VideoMetadata:
        """将视频字节写入临时文件后校验，临时文件总会被删除"""
        suffix = f".{extension_for_video_mime_type(mime_type)}"
        fd, temp_name = tempfile.mkstemp(suffix=suffix)
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            return await self.validate(temp_path)
        finally:
            temp_path.unlink(missing_ok=True)
