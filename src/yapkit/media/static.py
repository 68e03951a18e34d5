"""固定结果的媒体探测实现

不依赖 Pillow 解码或 ffprobe，返回构造时给定的尺寸/时长，
用于测试以及没有平台媒体能力的运行环境。
"""

from pathlib import Path

from ..exceptions import CouldNotLoadAssetError
from .protocols import VideoProbeResult


class StaticImageDecoder:
    """始终返回固定尺寸的图片解码器"""

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self.width = width
        self.height = height

    def decode_size(self, data: bytes) -> tuple[int, int]:
        return self.width, self.height


class StaticVideoProber:
    """始终返回固定结果的视频探测器

    file_size 为 None 时取被探测文件的实际大小；
    fail=True 时模拟无法加载视频。
    """

    def __init__(
        self,
        duration_seconds: float = 10.0,
        width: int | None = 1920,
        height: int | None = 1080,
        file_size: int | None = None,
        fail: bool = False,
    ) -> None:
        self.duration_seconds = duration_seconds
        self.width = width
        self.height = height
        self.file_size = file_size
        self.fail = fail
        self.probed_paths: list[Path] = []

    async def probe(self, path: Path) -> VideoProbeResult:
        self.probed_paths.append(path)
        if self.fail:
            raise CouldNotLoadAssetError("static prober configured to fail")

        file_size = self.file_size
        if file_size is None and path.exists():
            file_size = path.stat().st_size

        return VideoProbeResult(
            duration_seconds=self.duration_seconds,
            width=self.width,
            height=self.height,
            file_size=file_size,
        )
