from wallpaperer.codec.image_codec import (
    FormatOptions,
    ImageCodec,
    normalize_format,
)

__all__ = [
    "FormatOptions",
    "ImageCodec",
    "normalize_format",
]
