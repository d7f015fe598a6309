import secrets
from datetime import datetime, timezone, timedelta

def generate_verification_code(length: int = 8) -> str:
    return "".join(str(secrets.randbelow(10)) for _ in range(length))

def get_code_expiry_time(days: int = 1) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)

def as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
