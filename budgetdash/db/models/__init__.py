# import all models for Alembic
from budgetdash.db.models.user import User
from budgetdash.db.models.import_run import ImportRun
from budgetdash.db.models.import_error import ImportRowError
from budgetdash.db.models.facts import SalesFact
from budgetdash.db.models.merge_rule import CustomerMergeRule
from budgetdash.db.models.pricing import ProductGroupPricing
