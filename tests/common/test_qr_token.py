from datetime import date, timedelta

import pytest

from src.attendance_payroll.attendance_payroll.common.qr_token import QRTokenCodec, QRTokenPolicy
from src.attendance_payroll.attendance_payroll.core.exceptions import ValidationError
from tests.fakes import QR_SUFFIX, at

NOW = at(date(2026, 3, 10), 15, 0)


def make_codec() -> QRTokenCodec:
    return QRTokenCodec(QRTokenPolicy(suffix=QR_SUFFIX, validity_minutes=5))


def test_generated_token_validates():
    codec = make_codec()
    token = codec.generate(NOW)
    assert token.endswith(QR_SUFFIX)
    assert codec.validate(token, NOW) == NOW


def test_tolerance_is_inclusive():
    codec = make_codec()
    assert codec.validate(codec.generate(NOW - timedelta(minutes=5)), NOW)
    with pytest.raises(ValidationError):
        codec.validate(codec.generate(NOW - timedelta(minutes=5, seconds=1)), NOW)
    with pytest.raises(ValidationError):
        codec.validate(codec.generate(NOW + timedelta(minutes=6)), NOW)


@pytest.mark.parametrize("token", ["", QR_SUFFIX, "2026-03-10T10:00:00", "yesterday" + QR_SUFFIX])
def test_malformed_tokens(token):
    with pytest.raises(ValidationError):
        make_codec().validate(token, NOW)


def test_naive_timestamp_is_read_as_utc():
    # 15:00 in Karachi is 10:00 UTC.
    assert make_codec().validate("2026-03-10T10:00:00" + QR_SUFFIX, NOW)


def test_z_suffix_is_accepted():
    assert make_codec().validate("2026-03-10T10:02:00Z" + QR_SUFFIX, NOW)


def test_render_png():
    png = make_codec().render_png(make_codec().generate(NOW)).getvalue()
    assert png.startswith(b"\x89PNG")
