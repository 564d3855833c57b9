"""Scannable codes for tickets and badges, rendered as SVG."""
import base64
import io
import logging

import qrcode
import qrcode.image.svg

logger = logging.getLogger(__name__)

SVG_MEDIA_TYPE = "image/svg+xml"


def render_code_svg(value: str) -> bytes:
    """Encode `value` as a QR code and return the SVG document bytes."""
    try:
        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
            image_factory=qrcode.image.svg.SvgPathImage,
        )
        qr.add_data(value)
        qr.make(fit=True)

        img = qr.make_image()
        buffer = io.BytesIO()
        img.save(buffer)
        return buffer.getvalue()
    except Exception as e:
        logger.error(f"Error rendering code for {value}: {e}")
        raise


def svg_data_uri(svg: bytes) -> str:
    return f"data:{SVG_MEDIA_TYPE};base64,{base64.b64encode(svg).decode()}"
