from .tenancy import Organization
from .auth import AccessToken
from .production import Employee, Ingredient, Recipe, recipe_ingredients, Batch, BatchIngredient
from .quality import ProblemLog, problem_logs_employees, ReceivingLog

__all__ = [
    'Organization',
    'AccessToken',
    'Employee', 'Ingredient', 'Recipe', 'recipe_ingredients', 'Batch', 'BatchIngredient',
    'ProblemLog', 'problem_logs_employees', 'ReceivingLog',
]
