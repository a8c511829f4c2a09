"""Client for the optional network-backed "smart" ingredient merger.

The remote merger only performs semantic merging ("broccoli floret" and
"broccoli") on top of the local combiner's output. It is never required: every
outcome other than a valid merged list leaves the local result in place.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError, field_validator
from tenacity import (
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from grocerylist.config import get_settings
from grocerylist.logging_config import get_logger
from grocerylist.models import Category, ConsolidatedLine, RawIngredientLine
from grocerylist.plan.formatting import decimal_to_fraction
from grocerylist.plan.grocery_list import combine_ingredients

logger = get_logger(__name__)


# =============================================================================
# Wire Schemas
# =============================================================================


class PreCombinedItem(BaseModel):
    """Locally combined line as sent to the merger."""

    name: str
    quantity: str | None = None
    unit: str | None = None
    category: Category
    source_recipes: list[str] = Field(default_factory=list, serialization_alias="sourceRecipes")

    @classmethod
    def from_line(cls, line: ConsolidatedLine) -> "PreCombinedItem":
        return cls(
            name=line.name,
            quantity=(
                decimal_to_fraction(line.total_quantity)
                if line.total_quantity is not None
                else None
            ),
            unit=line.unit,
            category=line.category,
            source_recipes=list(line.source_recipes),
        )


class SmartGroceryItem(BaseModel):
    """Merged line returned by the merger."""

    name: str = Field(min_length=1)
    total_quantity: float | None = Field(default=None, alias="totalQuantity")
    unit: str | None = None
    category: Category = Category.OTHER
    source_recipes: list[str] = Field(default_factory=list, alias="sourceRecipes")

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v: Any) -> Category:
        """Unknown categories land in OTHER rather than failing the merge."""
        return Category.coerce(v if isinstance(v, str) else None)

    @field_validator("unit", mode="before")
    @classmethod
    def blank_unit(cls, v: Any) -> str | None:
        """Treat empty units as absent."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v

    def to_line(self) -> ConsolidatedLine:
        return ConsolidatedLine(
            name=self.name.strip().lower(),
            total_quantity=self.total_quantity,
            unit=self.unit,
            category=self.category,
            source_recipes=tuple(dict.fromkeys(self.source_recipes)),
        )


class SmartMergeResponse(BaseModel):
    """Response envelope of the merger."""

    success: bool = True
    skipped: bool = False
    message: str | None = None
    error: str | None = None
    items: list[SmartGroceryItem] | None = None


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class SmartMergeOk:
    """The merger returned a refined list."""

    items: list[ConsolidatedLine]


@dataclass(frozen=True)
class SmartMergeUnavailable:
    """The merger is not configured or chose not to run."""

    reason: str


@dataclass(frozen=True)
class SmartMergeFailed:
    """The merger was called but its answer cannot be used."""

    reason: str
    status_code: int | None = None


SmartMergeResult = SmartMergeOk | SmartMergeUnavailable | SmartMergeFailed


@dataclass(frozen=True)
class SmartCombineOutcome:
    """Final grocery lines and whether the smart merge was applied."""

    items: list[ConsolidatedLine]
    smart_merged: bool


# =============================================================================
# Client
# =============================================================================


class SmartMergeClient:
    """HTTP client for the smart merge endpoint."""

    BACKOFF_BASE = 1
    BACKOFF_MAX = 10

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.url = url if url is not None else settings.smart_merge_url
        self.api_key = api_key if api_key is not None else settings.smart_merge_api_key
        self.timeout = timeout if timeout is not None else settings.smart_merge_timeout
        self.max_retries = (
            max_retries if max_retries is not None else settings.smart_merge_max_retries
        )
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {
                "Accept": "application/json",
                "User-Agent": "Grocerylist/1.0",
            }
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "SmartMergeClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        """POST with retries on timeouts and network errors."""
        client = await self._get_client()

        @retry(
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.BACKOFF_BASE, max=self.BACKOFF_MAX),
        )
        async def _do_request() -> httpx.Response:
            return await client.post(self.url, json=payload)

        return await _do_request()

    async def merge(self, lines: Iterable[ConsolidatedLine]) -> SmartMergeResult:
        """
        Ask the merger to combine semantic duplicates in a locally combined list.

        Args:
            lines: Output of the local combiner.

        Returns:
            SmartMergeOk with the refined lines, SmartMergeUnavailable when the
            merger is not configured or skipped, SmartMergeFailed otherwise.
        """
        lines = list(lines)
        if not self.is_configured:
            return SmartMergeUnavailable(reason="smart merge URL not configured")
        if not lines:
            return SmartMergeOk(items=[])

        payload = {
            "preCombined": [
                PreCombinedItem.from_line(line).model_dump(mode="json", by_alias=True)
                for line in lines
            ]
        }

        try:
            response = await self._post(payload)
        except RetryError as e:
            logger.warning(f"Smart merge failed after {self.max_retries} attempts: {self.url}")
            return SmartMergeFailed(reason=f"request failed after {self.max_retries} attempts: {e}")
        except httpx.HTTPError as e:
            logger.warning(f"Smart merge request error: {e}")
            return SmartMergeFailed(reason=f"request error: {e}")

        if response.status_code >= 400:
            error_detail = response.text[:500] if response.text else "No details"
            logger.warning(f"Smart merge error {response.status_code}: {error_detail}")
            return SmartMergeFailed(
                reason=f"status {response.status_code}: {error_detail}",
                status_code=response.status_code,
            )

        try:
            body = SmartMergeResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.warning(f"Malformed smart merge response: {e.error_count()} errors")
            return SmartMergeFailed(reason="malformed response", status_code=response.status_code)

        if body.skipped:
            logger.info(f"Smart merge skipped: {body.message or 'no reason given'}")
            return SmartMergeUnavailable(reason=body.message or "skipped by merger")
        if body.items is None:
            return SmartMergeFailed(
                reason=body.error or "response carried no items",
                status_code=response.status_code,
            )

        return SmartMergeOk(items=[item.to_line() for item in body.items])


async def smart_combine_ingredients(
    ingredients: Iterable[RawIngredientLine],
    recipe_names: Mapping[str, str],
    client: SmartMergeClient,
) -> SmartCombineOutcome:
    """
    Combine locally, then let the smart merger refine the result if it can.

    The local result is returned unchanged whenever the merger is unavailable
    or fails.
    """
    local = combine_ingredients(ingredients, recipe_names)
    result = await client.merge(local)

    if isinstance(result, SmartMergeOk):
        logger.info(f"Smart merge reduced {len(local)} lines to {len(result.items)}")
        return SmartCombineOutcome(items=result.items, smart_merged=True)
    if isinstance(result, SmartMergeUnavailable):
        return SmartCombineOutcome(items=local, smart_merged=False)

    logger.warning(f"Falling back to local grocery list: {result.reason}")
    return SmartCombineOutcome(items=local, smart_merged=False)
