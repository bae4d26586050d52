"""Runtime configuration for the courier integrations."""

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_origin() -> dict[str, Any]:
    return {
        "name": "Warehouse",
        "street": "123 Warehouse St",
        "city": "Kotte",
        "state": "Colombo",
        "postal_code": "10300",
        "phone": "+9477123456",
        "country": "LK",
    }


class CouriersConfig(BaseSettings):
    """Deployment-wide courier settings; tenant credentials live elsewhere."""

    model_config = SettingsConfigDict(env_prefix="COURIERS_")

    request_timeout: float = 20.0
    redact_pii: bool = True

    farda_express_api_url: str = "https://www.fdedomestic.com/api/parcel"
    trans_express_api_url: str = "https://portal.transexpress.lk/api"
    royal_express_api_url: str = "https://v1.api.curfox.com/api/public"
    royal_express_tenant: str = "royalexpress"
    royal_express_email: str = ""
    royal_express_password: str = ""
    royal_express_default_business_id: int | None = None

    default_service: str = "Standard"
    default_origin: dict[str, Any] = Field(default_factory=_default_origin)
    sync_delay_seconds: float = 2.0
