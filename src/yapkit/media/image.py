"""图片元数据探测 -- 文件头签名识别 MIME + Pillow 解码尺寸

尺寸仅为参考元数据：解码失败时宽高为 0，附件照常构造。
"""

from io import BytesIO

import structlog
from PIL import Image
from pydantic import BaseModel

from .protocols import ImageDecoder

log = structlog.get_logger()

DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"

JPEG_SIGNATURE = b"\xff\xd8\xff"
PNG_SIGNATURE = b"\x89PNG"

# EXIF Orientation 5-8 表示图像旋转了 90/270 度
_EXIF_ORIENTATION_TAG = 0x0112
_ROTATED_ORIENTATIONS = {5, 6, 7, 8}

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/heic": "heic",
    "image/webp": "webp",
}


class ImageMetadata(BaseModel):
    mime_type: str
    width: int = 0
    height: int = 0


class PillowImageDecoder:
    """基于 Pillow 的图片解码器

    只读取图片头部获取尺寸，按 EXIF 方向换算为显示尺寸。
    Pillow 默认不支持 HEIC，此类图片解码失败后按尺寸 0 处理。
    """

    def decode_size(self, data: bytes) -> tuple[int, int]:
        with Image.open(BytesIO(data)) as image:
            width, height = image.size
            orientation = image.getexif().get(_EXIF_ORIENTATION_TAG)
        if orientation in _ROTATED_ORIENTATIONS:
            return height, width
        return width, height


def sniff_image_mime_type(data: bytes) -> str:
    """按文件头签名识别图片 MIME 类型，无法识别时返回 image/jpeg"""
    if data.startswith(JPEG_SIGNATURE):
        return "image/jpeg"
    if data.startswith(PNG_SIGNATURE):
        return "image/png"

    mime_type = DEFAULT_IMAGE_MIME_TYPE
    if len(data) >= 12:
        if data[4:8] == b"ftyp":
            mime_type = "image/heic"
        if data[0:4] == b"RIFF" and data[8:12] == b"WEBP":
            mime_type = "image/webp"
    return mime_type


def detect_image_metadata(
    data: bytes,
    decoder: ImageDecoder | None = None,
) -> ImageMetadata:
    """识别图片 MIME 类型并解码宽高

    Args:
        data: 图片原始字节
        decoder: 图片解码器，None 时使用 PillowImageDecoder

    Returns:
        ImageMetadata（解码失败时 width/height 为 0）
    """
    mime_type = sniff_image_mime_type(data)
    decoder = decoder or PillowImageDecoder()

    width = height = 0
    try:
        width, height = decoder.decode_size(data)
    except Exception as e:
        log.debug(
            "image_decode_failed",
            mime_type=mime_type,
            error=str(e),
            error_type=type(e).__name__,
        )

    return ImageMetadata(mime_type=mime_type, width=width, height=height)


def extension_for_mime_type(mime_type: str) -> str:
    """图片 MIME 类型对应的文件扩展名，未知类型返回 jpg"""
    return _EXTENSIONS.get(mime_type, "jpg")
