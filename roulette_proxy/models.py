import time

from pydantic import BaseModel, Field


def now_ms() -> int:
    return int(time.time() * 1000)


class ResponseEnvelope(BaseModel):
    """JSON body returned by the data routes. ``None`` fields are left out."""
    ok: bool
    status: int | None = None
    items: list[int | float] = Field(default_factory=list)
    hint: str | None = None
    ts: int = Field(default_factory=now_ms)
    source: str | None = None
    upstream: str | None = None
    slug: str | None = None
    sample: str | None = None
    error: str | None = None

    def to_json(self) -> dict:
        return self.model_dump(exclude_none=True)


class CredentialInfo(BaseModel):
    """Non-secret view of the configured Basic-Auth credentials."""
    user_present: bool
    user_length: int
    pass_present: bool
    pass_length: int

    @classmethod
    def from_values(cls, user: str, password: str) -> "CredentialInfo":
        return cls(
            user_present=bool(user),
            user_length=len(user),
            pass_present=bool(password),
            pass_length=len(password),
        )


class DebugAttempt(BaseModel):
    ok: bool
    status: int | None = None
    items: int = 0
    sample: str | None = None
    error: str | None = None


class DebugReport(BaseModel):
    ok: bool = True
    ts: int = Field(default_factory=now_ms)
    slug: str
    upstream: str
    credentials: CredentialInfo
    with_auth: DebugAttempt
    without_auth: DebugAttempt

    def to_json(self) -> dict:
        return self.model_dump(exclude_none=True)
