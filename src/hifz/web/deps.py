"""Request dependencies: the service and the requesting sheikh."""

from fastapi import Header, Request

from hifz.config.app_config import AppConfig
from hifz.core.loo7_service import Loo7Service


def get_service(request: Request) -> Loo7Service:
    """Service built at app creation time."""
    return request.app.state.service


def get_owner_id(
    request: Request,
    x_sheikh_id: str | None = Header(default=None),
) -> str:
    """Sheikh id from the X-Sheikh-Id header, else the configured default."""
    if x_sheikh_id:
        return x_sheikh_id
    config: AppConfig = request.app.state.config
    return config.tenancy.default_owner_id
