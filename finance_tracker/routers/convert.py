from typing import Any, Dict, Iterator, List, Optional

import httpx
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from ..config import settings
from ..currencies import SUPPORTED_CURRENCIES
from ..services.currency import ConversionResult, CurrencyConverter


router = APIRouter(tags=["currency"])


class ConvertIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Loosely typed so missing or malformed values reach the converter's own validation
    amount: Optional[Any] = None
    from_currency: Optional[Any] = Field(default=None, alias="from")
    to_currency: Optional[Any] = Field(default=None, alias="to")


def get_converter() -> Iterator[CurrencyConverter]:
    with httpx.Client(timeout=settings.exchange_rate_timeout) as client:
        yield CurrencyConverter(client)


@router.post(
    "/convert",
    response_model=ConversionResult,
    response_model_by_alias=True,
)
def convert(payload: ConvertIn, converter: CurrencyConverter = Depends(get_converter)):
    return converter.convert(payload.amount, payload.from_currency, payload.to_currency)


@router.get(
    "/currencies",
    response_model=List[Dict[str, str]],
)
def list_currencies():
    return SUPPORTED_CURRENCIES
