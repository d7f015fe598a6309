from datetime import datetime, timedelta, timezone

from utils.verification import generate_verification_code, get_code_expiry_time, as_utc


def test_code_is_eight_digits():
    code = generate_verification_code()

    assert len(code) == 8
    assert code.isdigit()


def test_codes_vary():
    codes = {generate_verification_code() for _ in range(20)}
    assert len(codes) > 1


def test_expiry_is_one_day_out():
    expires_at = get_code_expiry_time(days=1)
    delta = expires_at - datetime.now(timezone.utc)

    assert timedelta(hours=23, minutes=59) < delta <= timedelta(days=1)


def test_as_utc_naive():
    naive = datetime(2024, 1, 1, 12, 0)
    assert as_utc(naive).tzinfo == timezone.utc
    assert as_utc(naive).hour == 12


def test_as_utc_aware_unchanged():
    aware = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert as_utc(aware) is aware
