from __future__ import annotations

from pydantic import BaseModel


class UserRecord(BaseModel):
    id: str
    name: str
    username: str
    email: str
    phone: str | None = None


class UserCreate(BaseModel):
    # Required-field checks live in app.services.validation so they answer 400, not 422.
    name: str | None = None
    username: str | None = None
    email: str | None = None
    phone: str | None = None


class DeleteResponse(BaseModel):
    status: str = "deleted"
