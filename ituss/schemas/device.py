"""Device and media session schemas."""

from pydantic import Field

from ituss.schemas.auth import RequestModel, ResponseModel


class DeviceRegisterRequest(RequestModel):
    device_id: str = Field(min_length=1)


class DeviceRegisterResponse(ResponseModel):
    device_id: str


class LivekitInfoResponse(ResponseModel):
    room_name: str
    ws_url: str
    token: str


class StreamUrlResponse(ResponseModel):
    device_id: str
    stream_url: str
