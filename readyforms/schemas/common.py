from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field


def _strip(value):
    return value.strip() if isinstance(value, str) else value


# Surrounding whitespace is dropped before length and pattern checks run.
TrimmedStr = Annotated[str, BeforeValidator(_strip)]


class VersionedRequest(BaseModel):
    version: int = Field(..., ge=0, description="Version of the record last seen by the client")


class MessageResponse(BaseModel):
    status: str = "success"
    message: str
