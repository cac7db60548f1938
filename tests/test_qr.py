"""Tests for the QR encoder adapter."""

import io

import pytest
from PIL import Image
from pydantic import ValidationError

from linkforge import qr
from linkforge.qr import DATA_URL_PREFIX, QRGenerationError, decode_data_url, generate_qr_code, qr_download_filename
from linkforge.schemas import QRCustomization


def test_generates_png_data_url():
    data_url = generate_qr_code("https://short.ly/abc1234")
    assert data_url.startswith(DATA_URL_PREFIX)
    png = decode_data_url(data_url)
    assert png.startswith(b"\x89PNG")
    assert Image.open(io.BytesIO(png)).size == (256, 256)


@pytest.mark.parametrize("level", ["L", "M", "Q", "H"])
def test_customization_applied(level):
    customization = QRCustomization(
        size=128,
        error_correction_level=level,
        foreground_color="#FF0000",
        background_color="#00FF00",
        margin=4,
    )
    img = Image.open(io.BytesIO(decode_data_url(generate_qr_code("hello", customization))))
    assert img.size == (128, 128)
    corner = img.convert("RGB").getpixel((0, 0))
    assert corner == (0, 255, 0)


def test_encoder_failure_is_wrapped(monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("encoder crashed")

    monkeypatch.setattr(qr.qrcode, "QRCode", explode)
    with pytest.raises(QRGenerationError, match="Failed to generate QR code"):
        generate_qr_code("hello")


def test_oversized_payload_fails():
    with pytest.raises(QRGenerationError):
        generate_qr_code("x" * 10000)


@pytest.mark.parametrize("kwargs", [
    {"size": 10},
    {"error_correction_level": "X"},
    {"foreground_color": "red"},
    {"background_color": "#12345"},
    {"margin": -1},
])
def test_invalid_customization(kwargs):
    with pytest.raises(ValidationError):
        QRCustomization(**kwargs)


def test_customization_is_immutable():
    customization = QRCustomization()
    with pytest.raises(ValidationError):
        customization.size = 512


def test_decode_rejects_other_data():
    with pytest.raises(ValueError):
        decode_data_url("https://example.com/qr.png")


def test_download_filename():
    assert qr_download_filename(1760000000000) == "qrcode-1760000000000.png"
    assert qr_download_filename().startswith("qrcode-")
