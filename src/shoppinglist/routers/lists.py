"""API routes for grocery lists."""

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shoppinglist.database import get_db
from shoppinglist.enrich.pricing import PriceEstimator
from shoppinglist.enrich.usage import record_ai_usage
from shoppinglist.logging_config import LoggingContext, get_logger
from shoppinglist.models import GroceryItem, GroceryList, WeeklyMealPlan
from shoppinglist.normalize.items import ParsedItem, calculate_total_cost
from shoppinglist.plan.shopping_list import NoIngredientsError, ShoppingListGenerator
from shoppinglist.schemas import (
    GroceryItemResponse,
    GroceryListGenerateRequest,
    GroceryListGenerateResponse,
    GroceryListResponse,
    GroceryListSummary,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/lists", tags=["lists"])


async def get_price_estimator() -> AsyncIterator[PriceEstimator]:
    """Dependency yielding a price estimator that is closed after the request."""
    async with PriceEstimator() as estimator:
        yield estimator


def _list_response(grocery_list: GroceryList) -> GroceryListResponse:
    items = [GroceryItemResponse.model_validate(item) for item in grocery_list.items]
    parsed = [ParsedItem(name=item.name, qty=item.qty, price=item.price) for item in items]
    by_category: dict[str, list[GroceryItemResponse]] = {}
    for item in items:
        by_category.setdefault(item.category, []).append(item)

    return GroceryListResponse(
        id=grocery_list.id,
        name=grocery_list.name,
        meal_plan_id=grocery_list.meal_plan_id,
        created_at=grocery_list.created_at,
        raw_text=grocery_list.raw_text,
        items=items,
        items_by_category=by_category,
        total_cost=round(calculate_total_cost(parsed), 2),
    )


@router.post(
    "/generate",
    response_model=GroceryListGenerateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_grocery_list(
    request: GroceryListGenerateRequest,
    db: AsyncSession = Depends(get_db),
    estimator: PriceEstimator = Depends(get_price_estimator),
) -> GroceryListGenerateResponse:
    """
    Build a grocery list from a plan's cooking meals.

    Ingredient lines are parsed, near-duplicates consolidated, missing prices
    estimated, and the list stored. AI usage is added to the running totals.
    """
    with LoggingContext(plan_id=request.plan_id):
        result = await db.execute(
            select(WeeklyMealPlan)
            .where(WeeklyMealPlan.id == request.plan_id)
            .options(selectinload(WeeklyMealPlan.meals))
        )
        plan = result.scalar_one_or_none()
        if not plan:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Meal plan {request.plan_id} not found",
            )

        generator = ShoppingListGenerator(estimator)
        try:
            generated = await generator.generate(plan, plan.meals, request.list_name)
        except NoIngredientsError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

        grocery_list = GroceryList(
            name=generated.name,
            raw_text=generated.raw_text,
            meal_plan_id=plan.id,
            items=[
                GroceryItem(
                    name=item.name,
                    qty=item.qty,
                    price=item.price,
                    category=item.category,
                    meal=item.meal,
                )
                for item in generated.items
            ],
        )
        db.add(grocery_list)
        await record_ai_usage(db, generated.usage)
        await db.commit()

        logger.info(f"Generated grocery list {grocery_list.id} with {len(generated.items)} items")
        return GroceryListGenerateResponse(
            id=grocery_list.id,
            name=grocery_list.name,
            item_count=len(generated.items),
            consolidated_from=generated.parsed_count,
            ai_calls=generated.usage.calls,
            ai_tokens=generated.usage.tokens,
        )


@router.get("/", response_model=list[GroceryListSummary])
async def list_grocery_lists(
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    db: AsyncSession = Depends(get_db),
) -> list[GroceryList]:
    """List grocery lists, newest first."""
    result = await db.execute(
        select(GroceryList)
        .order_by(GroceryList.created_at.desc(), GroceryList.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all())


@router.get("/{list_id}", response_model=GroceryListResponse)
async def get_grocery_list(
    list_id: int,
    db: AsyncSession = Depends(get_db),
) -> GroceryListResponse:
    """Get a list with its items grouped by category."""
    result = await db.execute(
        select(GroceryList)
        .where(GroceryList.id == list_id)
        .options(selectinload(GroceryList.items))
    )
    grocery_list = result.scalar_one_or_none()
    if not grocery_list:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Grocery list {list_id} not found",
        )
    return _list_response(grocery_list)
