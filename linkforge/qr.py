import base64
import io
import logging
import time
from typing import Optional

import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from PIL import Image

from linkforge.schemas import QRCustomization

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:image/png;base64,"
ERROR_CORRECTION = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


class QRGenerationError(Exception):
    pass


def generate_qr_code(text: str, customization: Optional[QRCustomization] = None) -> str:
    """Render ``text`` as a PNG QR code and return it as a data URI."""
    customization = customization or QRCustomization()
    try:
        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECTION[customization.error_correction_level],
            border=customization.margin,
        )
        qr.add_data(text)
        qr.make(fit=True)
        img = qr.make_image(
            fill_color=customization.foreground_color,
            back_color=customization.background_color,
        ).get_image()
        img = img.resize((customization.size, customization.size), Image.NEAREST)
        buf = io.BytesIO()
        img.save(buf, format="PNG")
    except Exception as e:
        logger.error("Error generating QR code: %s", e)
        raise QRGenerationError("Failed to generate QR code") from e
    return DATA_URL_PREFIX + base64.b64encode(buf.getvalue()).decode("ascii")


def decode_data_url(data_url: str) -> bytes:
    if not data_url.startswith(DATA_URL_PREFIX):
        raise ValueError("Not a PNG data URL")
    return base64.b64decode(data_url[len(DATA_URL_PREFIX):])


def qr_download_filename(now_ms: Optional[int] = None) -> str:
    return f"qrcode-{int(time.time() * 1000) if now_ms is None else now_ms}.png"
