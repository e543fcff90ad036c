"""Auth request/response schemas."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class ResponseModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ok: bool = True


class ErrorResponse(ResponseModel):
    ok: bool = False
    error: str


# --- Signup / Login ---

class SignupRequest(RequestModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class SignupResponse(ResponseModel):
    pass


class LoginRequest(RequestModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginResponse(ResponseModel):
    token: str


# --- Account ---

class AccountResponse(ResponseModel):
    id: str
    email: str
    device_id: str | None
