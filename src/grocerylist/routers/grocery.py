"""API routes for building grocery lists from planned recipes."""

from collections.abc import AsyncIterator
from uuid import uuid4

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from pydantic import BaseModel, Field

from grocerylist.config import get_settings
from grocerylist.logging_config import LoggingContext, get_logger
from grocerylist.merge import SmartMergeClient, smart_combine_ingredients
from grocerylist.models import Category, ConsolidatedLine, RawIngredientLine
from grocerylist.plan import (
    combine_ingredients,
    csv_filename,
    decimal_to_fraction,
    filter_pantry_items,
    format_grocery_item,
    generate_csv,
    group_by_category,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/grocery-list", tags=["grocery-list"])


# Request/Response schemas
class IngredientLineIn(BaseModel):
    """One ingredient line as parsed from a recipe."""

    recipe_id: str
    name: str = Field(min_length=1)
    quantity: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    unit: str | None = None
    category: Category = Category.OTHER
    sort_order: int | None = None

    def to_raw(self) -> RawIngredientLine:
        return RawIngredientLine(
            recipe_id=self.recipe_id,
            name=self.name,
            quantity=self.quantity,
            unit=self.unit,
            category=self.category,
            sort_order=self.sort_order,
        )


class GroceryListRequest(BaseModel):
    """Recipes planned for one shopping trip."""

    ingredients: list[IngredientLineIn]
    recipe_names: dict[str, str] = Field(default_factory=dict)
    pantry_items: list[str] = Field(default_factory=list)
    include_default_pantry: bool = False
    smart_merge: bool = False


class GroceryCsvRequest(GroceryListRequest):
    """Grocery list export for a named event."""

    event_name: str = "grocery list"


class GroceryListItem(BaseModel):
    """Single line of the grocery list."""

    name: str
    total_quantity: float | None = None
    quantity_display: str | None = None
    unit: str | None = None
    category: Category
    source_recipes: list[str]
    display: str

    @classmethod
    def from_line(cls, line: ConsolidatedLine) -> "GroceryListItem":
        return cls(
            name=line.name,
            total_quantity=line.total_quantity,
            quantity_display=(
                decimal_to_fraction(line.total_quantity)
                if line.total_quantity is not None
                else None
            ),
            unit=line.unit,
            category=line.category,
            source_recipes=list(line.source_recipes),
            display=format_grocery_item(line),
        )


class GroceryListResponse(BaseModel):
    """Consolidated grocery list."""

    items: list[GroceryListItem]
    items_by_category: dict[str, list[GroceryListItem]]
    smart_merged: bool = False


# Dependency to get the smart merge client
async def get_smart_merge_client() -> AsyncIterator[SmartMergeClient]:
    """Yield a smart merge client closed after the request."""
    async with SmartMergeClient() as client:
        yield client


async def _build_list(
    request: GroceryListRequest,
    client: SmartMergeClient,
) -> tuple[list[ConsolidatedLine], bool]:
    raw_lines = [line.to_raw() for line in request.ingredients]

    if request.smart_merge:
        outcome = await smart_combine_ingredients(raw_lines, request.recipe_names, client)
        lines, smart_merged = outcome.items, outcome.smart_merged
    else:
        lines, smart_merged = combine_ingredients(raw_lines, request.recipe_names), False

    pantry = list(request.pantry_items)
    if request.include_default_pantry:
        pantry.extend(get_settings().default_pantry_items)
    if pantry:
        lines = filter_pantry_items(lines, pantry)

    return lines, smart_merged


# =============================================================================
# Grocery List Endpoints
# =============================================================================


@router.post("", response_model=GroceryListResponse)
async def build_grocery_list(
    request: GroceryListRequest,
    client: SmartMergeClient = Depends(get_smart_merge_client),
) -> GroceryListResponse:
    """
    Combine the ingredients of several recipes into one grocery list.

    Quantities are summed across recipes with unit conversion, names are
    deduplicated, and pantry items are removed. With ``smart_merge`` the
    remote merger refines the list when it is available.
    """
    with LoggingContext(request_id=uuid4().hex):
        logger.info(
            f"Building grocery list from {len(request.ingredients)} ingredient lines "
            f"across {len(request.recipe_names)} recipes"
        )

        lines, smart_merged = await _build_list(request, client)

    items_by_category = {
        category.label: [GroceryListItem.from_line(line) for line in category_lines]
        for category, category_lines in group_by_category(lines).items()
    }

    return GroceryListResponse(
        items=[GroceryListItem.from_line(line) for line in lines],
        items_by_category=items_by_category,
        smart_merged=smart_merged,
    )


@router.post("/csv")
async def export_grocery_list_csv(
    request: GroceryCsvRequest,
    client: SmartMergeClient = Depends(get_smart_merge_client),
) -> Response:
    """Export the grocery list as a CSV download."""
    with LoggingContext(request_id=uuid4().hex, event_id=request.event_name):
        lines, _ = await _build_list(request, client)
        csv_content = generate_csv(group_by_category(lines))
        filename = csv_filename(request.event_name)

        logger.info(f"Exporting {len(lines)} grocery lines to {filename}")

    return Response(
        content=csv_content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
