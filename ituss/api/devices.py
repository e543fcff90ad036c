"""Device registration and media session API endpoints."""

from fastapi import APIRouter, Depends

from ituss.api.deps import get_broker, get_current_account
from ituss.models.account import Account
from ituss.schemas.device import (
    DeviceRegisterRequest,
    DeviceRegisterResponse,
    LivekitInfoResponse,
    StreamUrlResponse,
)
from ituss.services.broker import Broker

router = APIRouter(tags=["devices"])


@router.post("/device/register", response_model=DeviceRegisterResponse)
def register_device(
    request: DeviceRegisterRequest,
    account: Account = Depends(get_current_account),
    broker: Broker = Depends(get_broker),
):
    """Bind a device to the current account, replacing the previous one."""
    device_id = broker.devices.register_device(account, request.device_id)
    return DeviceRegisterResponse(device_id=device_id)


@router.api_route("/livekit-info", methods=["GET", "POST"], response_model=LivekitInfoResponse)
async def livekit_info(
    account: Account = Depends(get_current_account),
    broker: Broker = Depends(get_broker),
):
    """Issue a subscribe-only LiveKit token for the bound device's room."""
    session = await broker.media.issue_media_token(account)
    return LivekitInfoResponse(
        room_name=session.room_name,
        ws_url=session.ws_url,
        token=session.token,
    )


@router.get("/stream-url", response_model=StreamUrlResponse)
def stream_url(
    account: Account = Depends(get_current_account),
    broker: Broker = Depends(get_broker),
):
    """Plain stream URL for viewers that do not use WebRTC."""
    device_id, url = broker.media.stream_info(account)
    return StreamUrlResponse(device_id=device_id, stream_url=url)
