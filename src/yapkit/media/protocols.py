"""媒体探测能力接口

图片像素解码与视频元数据探测都依赖平台能力，这里只定义窄接口：
字节/路径进，结构化元数据或类型化异常出。
使用 Protocol 实现结构化子类型（duck typing）。
"""

from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field


class VideoProbeResult(BaseModel):
    """视频探测器的原始结果

    duration_seconds 原样保留（可能为 NaN/inf），由 VideoValidator 判定是否有效。
    其余字段尽力而为，None 表示探测器无法提供。
    """

    duration_seconds: float = Field(description="时长（秒），未经校验")
    width: int | None = Field(default=None, description="显示宽度（像素）")
    height: int | None = Field(default=None, description="显示高度（像素）")
    file_size: int | None = Field(default=None, description="文件大小（字节）")


class ImageDecoder(Protocol):
    """图片解码接口"""

    def decode_size(self, data: bytes) -> tuple[int, int]:
        """返回 (width, height)，无法解码时抛出任意异常"""
        ...


class VideoProber(Protocol):
    """视频探测接口"""

    async def probe(self, path: Path) -> VideoProbeResult:
        """探测视频文件

        Raises:
            CouldNotLoadAssetError: 无法加载视频
        """
        ...
