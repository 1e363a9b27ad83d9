"""Meal plan service module."""

from app.services.meal_plans.service import MealPlanService


__all__ = ["MealPlanService"]
