import re
from typing import Optional
from urllib.parse import urlparse
from pydantic import BaseModel, Field, field_validator

SHORT_CODE_PATTERN = re.compile(r"^[A-Za-z0-9_-]{3,16}$")


class ShortLinkRequest(BaseModel):
    url: str = Field(max_length=2048)
    short_code: Optional[str] = None

    @field_validator('url')
    @classmethod
    def validate_url(cls, value):
        value = value.strip()
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError('Please enter a valid URL starting with http:// or https://')
        return value

    @field_validator('short_code', mode='before')
    @classmethod
    def validate_short_code(cls, value):
        if value is None:
            return None
        value = value.strip()
        if not value:
            return None
        if not SHORT_CODE_PATTERN.match(value):
            raise ValueError('Short code must be 3-16 letters, digits, "-" or "_"')
        return value
