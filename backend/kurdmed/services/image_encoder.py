# backend/kurdmed/services/image_encoder.py

import base64


class ImageEncodingError(ValueError):
    pass


def validate_image(data: bytes, mime_type: str) -> None:
    if not data:
        raise ImageEncodingError("empty image payload")
    if not (mime_type or "").startswith("image/"):
        raise ImageEncodingError(f"unsupported content type: {mime_type!r}")


def encode_image(data: bytes) -> str:
    """Base64 payload without the ``data:`` prefix."""
    return base64.b64encode(data).decode("ascii")


def to_data_url(data: bytes, mime_type: str) -> str:
    validate_image(data, mime_type)
    return f"data:{mime_type};base64,{encode_image(data)}"
