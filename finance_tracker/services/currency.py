"""Currency conversion through a third-party exchange-rate provider."""
import logging
import math
from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ..config import settings
from ..core.errors import UpstreamError, ValidationError


logger = logging.getLogger(__name__)


class ConversionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    original_amount: float = Field(alias="originalAmount")
    converted_amount: float = Field(alias="convertedAmount")
    rate: float
    from_currency: str = Field(alias="from")
    to_currency: str = Field(alias="to")


class CurrencyConverter:
    """Converts amounts using the live rate for a currency pair.

    Each call is independent: no rate is cached, so two conversions of the
    same pair issue two upstream requests. Same-currency conversions never
    touch the network.
    """

    def __init__(self, client: httpx.Client, base_url: Optional[str] = None):
        self.client = client
        self.base_url = base_url or settings.exchange_rate_api_url

    def convert(self, amount, from_currency: Optional[str], to_currency: Optional[str]) -> ConversionResult:
        if not amount or not from_currency or not to_currency:
            raise ValidationError("Missing parameters")
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount):
            raise ValidationError("Invalid amount")
        if not isinstance(from_currency, str) or not isinstance(to_currency, str):
            raise ValidationError("Invalid currency code")

        source = from_currency.strip().upper()
        target = to_currency.strip().upper()

        if source == target:
            return ConversionResult(
                original_amount=amount,
                converted_amount=amount,
                rate=1,
                from_currency=source,
                to_currency=target,
            )

        rate = self.fetch_rate(source, target)
        return ConversionResult(
            original_amount=amount,
            converted_amount=round(amount * rate, 2),
            rate=rate,
            from_currency=source,
            to_currency=target,
        )

    def fetch_rate(self, source: str, target: str) -> float:
        """One GET to the provider; the rate is read from ``rates[target]``."""
        logger.debug("Fetching exchange rate %s -> %s", source, target)
        try:
            resp = self.client.get(self.base_url, params={"from": source, "to": target})
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            logger.error("Exchange rate request failed for %s -> %s: %s", source, target, e)
            raise UpstreamError("Failed to fetch exchange rate") from e
        except ValueError as e:
            logger.error("Exchange rate provider returned invalid JSON: %s", e)
            raise UpstreamError("Failed to fetch exchange rate") from e

        rate = (data.get("rates") or {}).get(target) if isinstance(data, dict) else None
        if not isinstance(rate, (int, float)) or isinstance(rate, bool):
            logger.error("Exchange rate response has no rate for %s: %s", target, data)
            raise UpstreamError("Failed to fetch exchange rate")
        return rate
