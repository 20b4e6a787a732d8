import math

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    message: str


class PageMeta(BaseModel):
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    pages: int = Field(..., ge=0)


def page_meta(total: int, page: int, limit: int) -> dict:
    return {"total": total, "page": page, "pages": math.ceil(total / limit) if limit else 0}
