"""API routes for weekly meal plans and their meals."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shoppinglist.database import get_db
from shoppinglist.logging_config import get_logger
from shoppinglist.models import Meal, WeeklyMealPlan
from shoppinglist.schemas import (
    MealResponse,
    MealUpdate,
    WeeklyMealPlanCreate,
    WeeklyMealPlanListResponse,
    WeeklyMealPlanResponse,
    WeeklyMealPlanUpdate,
    apply_update,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/meal-plans", tags=["meal-plans"])


# =============================================================================
# Helper Functions
# =============================================================================


async def get_plan_or_404(db: AsyncSession, plan_id: int) -> WeeklyMealPlan:
    """Load a plan with its meals, or raise 404."""
    result = await db.execute(
        select(WeeklyMealPlan)
        .where(WeeklyMealPlan.id == plan_id)
        .options(selectinload(WeeklyMealPlan.meals))
    )
    plan = result.scalar_one_or_none()

    if not plan:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Meal plan {plan_id} not found",
        )
    return plan


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/", response_model=WeeklyMealPlanResponse, status_code=status.HTTP_201_CREATED)
async def create_meal_plan(
    request: WeeklyMealPlanCreate,
    db: AsyncSession = Depends(get_db),
) -> WeeklyMealPlan:
    """Create a weekly plan together with its meals."""
    plan = WeeklyMealPlan(
        name=request.name,
        week_start_date=request.week_start_date,
        meals=[Meal(**meal.model_dump()) for meal in request.meals],
    )
    db.add(plan)
    await db.commit()

    logger.info(f"Created meal plan {plan.id} with {len(plan.meals)} meals")
    return await get_plan_or_404(db, plan.id)


@router.get("/", response_model=WeeklyMealPlanListResponse)
async def list_meal_plans(
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
    db: AsyncSession = Depends(get_db),
) -> WeeklyMealPlanListResponse:
    """List plans, most recent week first."""
    total = (await db.execute(select(func.count(WeeklyMealPlan.id)))).scalar_one()
    result = await db.execute(
        select(WeeklyMealPlan)
        .options(selectinload(WeeklyMealPlan.meals))
        .order_by(WeeklyMealPlan.week_start_date.desc(), WeeklyMealPlan.id)
        .offset(offset)
        .limit(limit)
    )
    plans = result.scalars().all()

    return WeeklyMealPlanListResponse(
        plans=[WeeklyMealPlanResponse.model_validate(plan) for plan in plans],
        total=total,
    )


@router.get("/{plan_id}", response_model=WeeklyMealPlanResponse)
async def get_meal_plan(
    plan_id: int,
    db: AsyncSession = Depends(get_db),
) -> WeeklyMealPlan:
    """Get a plan by ID."""
    return await get_plan_or_404(db, plan_id)


@router.patch("/{plan_id}", response_model=WeeklyMealPlanResponse)
async def update_meal_plan(
    plan_id: int,
    request: WeeklyMealPlanUpdate,
    db: AsyncSession = Depends(get_db),
) -> WeeklyMealPlan:
    """Rename a plan or move it to another week."""
    plan = await get_plan_or_404(db, plan_id)

    try:
        changed = apply_update(plan, request)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    await db.commit()
    logger.info(f"Updated meal plan {plan_id}: {', '.join(changed) or 'no changes'}")
    return plan


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_meal_plan(
    plan_id: int,
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Delete a plan; its meals and pantry items go with it."""
    plan = await get_plan_or_404(db, plan_id)
    await db.delete(plan)
    await db.commit()

    logger.info(f"Deleted meal plan {plan_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/meals/{meal_id}", response_model=MealResponse)
async def update_meal(
    meal_id: int,
    request: MealUpdate,
    db: AsyncSession = Depends(get_db),
) -> Meal:
    """Update the fields of a single meal."""
    meal = await db.get(Meal, meal_id)
    if not meal:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Meal {meal_id} not found",
        )

    try:
        changed = apply_update(meal, request)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    await db.commit()
    logger.info(f"Updated meal {meal_id}: {', '.join(changed) or 'no changes'}")
    return meal
