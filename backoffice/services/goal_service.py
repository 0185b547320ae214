from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from decimal import Decimal

from backoffice.schemas import SalesGoal

logger = logging.getLogger(__name__)


def find_goal(goals: Iterable[SalesGoal], month: str) -> SalesGoal | None:
    for goal in goals:
        if goal.month == month:
            return goal
    return None


def upsert_goal(
    goals: list[SalesGoal],
    *,
    month: str,
    wholesale_target: Decimal,
    retail_target: Decimal,
) -> SalesGoal:
    for index, existing in enumerate(goals):
        if existing.month != month:
            continue
        goal = SalesGoal(
            id=existing.id,
            month=month,
            wholesale_target=wholesale_target,
            retail_target=retail_target,
        )
        goals[index] = goal
        logger.info('Replaced sales goal for %s', month)
        return goal

    goal = SalesGoal(
        id=uuid.uuid4().hex,
        month=month,
        wholesale_target=wholesale_target,
        retail_target=retail_target,
    )
    goals.append(goal)
    logger.info('Added sales goal for %s', month)
    return goal
