"""媒体探测 -- 图片签名识别/解码、视频时长探测"""

from .image import (
    ImageMetadata,
    PillowImageDecoder,
    detect_image_metadata,
    extension_for_mime_type,
    sniff_image_mime_type,
)
from .protocols import ImageDecoder, VideoProber, VideoProbeResult
from .static import StaticImageDecoder, StaticVideoProber
from .video import (
    FfprobeVideoProber,
    VideoMetadata,
    VideoValidator,
    mime_type_for_extension,
)

__all__ = [
    "ImageDecoder",
    "VideoProber",
    "VideoProbeResult",
    "ImageMetadata",
    "PillowImageDecoder",
    "detect_image_metadata",
    "sniff_image_mime_type",
    "extension_for_mime_type",
    "FfprobeVideoProber",
    "VideoMetadata",
    "VideoValidator",
    "mime_type_for_extension",
    "StaticImageDecoder",
    "StaticVideoProber",
]
