"""Price estimates for grocery items from an OpenAI-compatible chat API."""

import json
import re
from dataclasses import dataclass, field, replace
from typing import Any

import httpx
from tenacity import (
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from shoppinglist.config import get_settings
from shoppinglist.enrich.usage import AIUsage
from shoppinglist.logging_config import get_logger
from shoppinglist.normalize.items import DEFAULT_PRICE, ParsedItem, group_items_by_category

logger = get_logger(__name__)
settings = get_settings()

_CODE_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


class PriceEstimationError(Exception):
    """Raised when the pricing API cannot be reached or answers badly."""

    def __init__(self, message: str, category: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.category = category
        self.status_code = status_code


@dataclass
class PricingResult:
    """Priced copies of the input items, plus what the pricing cost."""

    items: list[ParsedItem] = field(default_factory=list)
    usage: AIUsage = field(default_factory=AIUsage)


def clean_ai_response(content: str) -> str:
    """Strip markdown code fences and surrounding whitespace from model output."""
    return _CODE_FENCE.sub("", content).strip()


def match_price(item_name: str, prices: list[dict[str, Any]]) -> str | None:
    """Find the price whose name contains, or is contained in, the item name."""
    wanted = item_name.lower()
    for entry in prices:
        if not isinstance(entry, dict) or not entry.get("name") or entry.get("price") is None:
            continue
        candidate = str(entry["name"]).lower()
        if candidate in wanted or wanted in candidate:
            return str(entry["price"])
    return None


def build_prompt(category: str, items: list[ParsedItem]) -> str:
    item_names = ", ".join(f"{item.qty or '1'} {item.name}" for item in items)
    return (
        f"Estimate grocery prices for these {category.lower()} items. "
        'Return ONLY a JSON array with format [{"name": "item_name", "price": "X.XX"}]. '
        f"Items: {item_names}"
    )


class PriceEstimator:
    """Fills in missing item prices, one chat completion per category.

    Items that already carry a real price are left alone. When no API key is
    configured, or a category request fails, the placeholder price is used.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = settings.openai_api_key if api_key is None else api_key
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.model = model or settings.openai_model
        self.timeout = timeout or settings.ai_request_timeout
        self.max_retries = max_retries or settings.ai_max_retries
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "PriceEstimator":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers={"Authorization": f"Bearer {self.api_key}"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _complete(self, prompt: str, category: str) -> tuple[str, int]:
        """Send one chat completion. Returns (content, total tokens)."""
        client = await self._get_client()
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.1,
            "max_tokens": 500,
        }

        @retry(
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, max=10),
        )
        async def _do_request() -> httpx.Response:
            return await client.post("/chat/completions", json=payload)

        try:
            response = await _do_request()
        except RetryError as e:
            raise PriceEstimationError(
                f"Pricing request failed after {self.max_retries} attempts", category=category
            ) from e

        if response.status_code >= 400:
            raise PriceEstimationError(
                f"Pricing request failed with status {response.status_code}",
                category=category,
                status_code=response.status_code,
            )

        body = response.json()
        try:
            content = body["choices"][0]["message"]["content"] or "[]"
        except (KeyError, IndexError, TypeError) as e:
            raise PriceEstimationError("Unexpected pricing response shape", category=category) from e
        tokens = int((body.get("usage") or {}).get("total_tokens") or 0)
        return content, tokens

    async def estimate_prices(self, items: list[ParsedItem]) -> PricingResult:
        """Return priced copies of ``items`` and the AI usage spent on them."""
        priced = [replace(item) for item in items]
        pending = [item for item in priced if not item.price or item.price == DEFAULT_PRICE]

        if not pending:
            return PricingResult(items=priced)

        if not self.api_key:
            logger.info("No pricing API key configured, using placeholder prices")
            for item in pending:
                item.price = DEFAULT_PRICE
            return PricingResult(items=priced)

        usage = AIUsage()
        for category, category_items in group_items_by_category(pending).items():
            try:
                content, tokens = await self._complete(
                    build_prompt(category, category_items), category
                )
                usage = usage + AIUsage(calls=1, tokens=tokens)
                prices = json.loads(clean_ai_response(content))
                if not isinstance(prices, list):
                    raise ValueError("expected a JSON array")
            except (PriceEstimationError, ValueError) as e:
                logger.warning(f"Price estimation failed for {category}: {e}")
                prices = []

            for item in category_items:
                item.price = match_price(item.name, prices) or DEFAULT_PRICE

        logger.info(
            f"Priced {len(pending)} items with {usage.calls} calls, {usage.tokens} tokens"
        )
        return PricingResult(items=priced, usage=usage)
