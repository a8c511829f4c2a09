"""Tests for the smart merge client and the local fallback."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from grocerylist.merge.smart_merge import (
    PreCombinedItem,
    SmartMergeClient,
    SmartMergeFailed,
    SmartMergeOk,
    SmartMergeUnavailable,
    smart_combine_ingredients,
)
from grocerylist.models import Category, ConsolidatedLine
from grocerylist.plan.grocery_list import combine_ingredients

MERGE_URL = "https://merge.example.com/combine-ingredients"


def make_client(handler, **kwargs):
    """Client whose requests are answered by ``handler``."""
    return SmartMergeClient(
        url=MERGE_URL,
        api_key="test-key",
        max_retries=1,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.fixture
def local_lines():
    """Locally combined lines with a semantic duplicate."""
    return [
        ConsolidatedLine(
            name="broccoli floret",
            total_quantity=2,
            unit="cup",
            category=Category.PRODUCE,
            source_recipes=("Stir Fry",),
        ),
        ConsolidatedLine(
            name="broccoli",
            total_quantity=1,
            unit="head",
            category=Category.PRODUCE,
            source_recipes=("Soup",),
        ),
        ConsolidatedLine(name="salt", category=Category.SPICES, source_recipes=("Soup",)),
    ]


class TestPreCombinedItem:
    """Tests for the request payload."""

    def test_from_line(self):
        """Test quantities are sent as fraction strings."""
        line = ConsolidatedLine(
            name="flour",
            total_quantity=2.5,
            unit="cup",
            category=Category.PANTRY,
            source_recipes=("Bread", "Cake"),
        )

        payload = PreCombinedItem.from_line(line).model_dump(mode="json", by_alias=True)

        assert payload == {
            "name": "flour",
            "quantity": "2 1/2",
            "unit": "cup",
            "category": "pantry",
            "sourceRecipes": ["Bread", "Cake"],
        }

    def test_missing_quantity(self):
        """Test a to-taste item sends a null quantity."""
        payload = PreCombinedItem.from_line(ConsolidatedLine(name="salt")).model_dump(
            mode="json", by_alias=True
        )
        assert payload["quantity"] is None
        assert payload["unit"] is None


class TestSmartMergeClient:
    """Tests for SmartMergeClient.merge."""

    def test_explicit_zero_settings_kept(self):
        """Test an explicit zero timeout or retry count is not replaced by settings."""
        client = SmartMergeClient(url=MERGE_URL, timeout=0, max_retries=0)

        assert client.timeout == 0
        assert client.max_retries == 0

    @pytest.mark.asyncio
    async def test_merged_items(self, local_lines):
        """Test a refined list is returned as consolidated lines."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "items": [
                        {
                            "name": "Broccoli",
                            "totalQuantity": 3,
                            "unit": "head",
                            "category": "produce",
                            "sourceRecipes": ["Stir Fry", "Soup", "Soup"],
                        },
                        {
                            "name": "salt",
                            "totalQuantity": None,
                            "unit": None,
                            "category": "seasonings",
                            "sourceRecipes": ["Soup"],
                        },
                    ],
                },
            )

        async with make_client(handler) as client:
            result = await client.merge(local_lines)

        assert isinstance(result, SmartMergeOk)
        assert result.items == [
            ConsolidatedLine(
                name="broccoli",
                total_quantity=3,
                unit="head",
                category=Category.PRODUCE,
                source_recipes=("Stir Fry", "Soup"),
            ),
            ConsolidatedLine(name="salt", category=Category.OTHER, source_recipes=("Soup",)),
        ]
        assert len(seen["body"]["preCombined"]) == 3
        assert seen["body"]["preCombined"][0]["quantity"] == "2"
        assert seen["auth"] == "Bearer test-key"

    @pytest.mark.asyncio
    async def test_skipped(self, local_lines):
        """Test a skipped response is reported as unavailable."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"success": True, "skipped": True, "message": "API key not configured"}
            )

        async with make_client(handler) as client:
            result = await client.merge(local_lines)

        assert result == SmartMergeUnavailable(reason="API key not configured")

    @pytest.mark.asyncio
    async def test_not_configured(self, local_lines):
        """Test no request is made without a URL."""
        client = SmartMergeClient(url="", transport=httpx.MockTransport(lambda r: 1 / 0))

        result = await client.merge(local_lines)

        assert isinstance(result, SmartMergeUnavailable)

    @pytest.mark.asyncio
    async def test_empty_input(self):
        """Test an empty list needs no request."""
        client = make_client(lambda r: 1 / 0)
        assert await client.merge([]) == SmartMergeOk(items=[])

    @pytest.mark.asyncio
    async def test_server_error(self, local_lines):
        """Test HTTP errors are reported as failures."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"success": False, "error": "AI API error: 529"})

        async with make_client(handler) as client:
            result = await client.merge(local_lines)

        assert isinstance(result, SmartMergeFailed)
        assert result.status_code == 500
        assert "529" in result.reason

    @pytest.mark.asyncio
    async def test_malformed_body(self, local_lines):
        """Test non-JSON bodies are reported as failures."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>gateway</html>")

        async with make_client(handler) as client:
            result = await client.merge(local_lines)

        assert result == SmartMergeFailed(reason="malformed response", status_code=200)

    @pytest.mark.asyncio
    async def test_invalid_items(self, local_lines):
        """Test items failing validation are reported as failures."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"items": [{"totalQuantity": "lots"}]})

        async with make_client(handler) as client:
            result = await client.merge(local_lines)

        assert isinstance(result, SmartMergeFailed)

    @pytest.mark.asyncio
    async def test_no_items(self, local_lines):
        """Test a body without items or skip flag is a failure."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": False, "error": "boom"})

        async with make_client(handler) as client:
            result = await client.merge(local_lines)

        assert result == SmartMergeFailed(reason="boom", status_code=200)

    @pytest.mark.asyncio
    async def test_timeout(self, local_lines):
        """Test timeouts are reported as failures after retries."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client(handler) as client:
            result = await client.merge(local_lines)

        assert isinstance(result, SmartMergeFailed)
        assert "after 1 attempts" in result.reason


class TestSmartCombineIngredients:
    """Tests for smart_combine_ingredients fallback behavior."""

    @pytest.fixture
    def raw_lines(self, make_line):
        return [
            make_line("broccoli florets", 2, "cups", recipe_id="a"),
            make_line("broccoli", 1, "head", recipe_id="b"),
        ]

    @pytest.mark.asyncio
    async def test_uses_merged_items(self, raw_lines):
        """Test a successful merge replaces the local list."""
        merged = [ConsolidatedLine(name="broccoli", total_quantity=2, unit="head")]
        client = SmartMergeClient(url=MERGE_URL)

        with patch.object(client, "merge", new_callable=AsyncMock) as mock_merge:
            mock_merge.return_value = SmartMergeOk(items=merged)
            outcome = await smart_combine_ingredients(raw_lines, {"a": "A", "b": "B"}, client)

        assert outcome.items == merged
        assert outcome.smart_merged is True
        mock_merge.assert_called_once_with(combine_ingredients(raw_lines, {"a": "A", "b": "B"}))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "result",
        [
            SmartMergeUnavailable(reason="skipped"),
            SmartMergeFailed(reason="status 500", status_code=500),
        ],
    )
    async def test_falls_back_to_local(self, raw_lines, result):
        """Test the local list is kept when the merge is unavailable or fails."""
        client = SmartMergeClient(url=MERGE_URL)

        with patch.object(client, "merge", new_callable=AsyncMock) as mock_merge:
            mock_merge.return_value = result
            outcome = await smart_combine_ingredients(raw_lines, {"a": "A", "b": "B"}, client)

        assert outcome.items == combine_ingredients(raw_lines, {"a": "A", "b": "B"})
        assert outcome.smart_merged is False
