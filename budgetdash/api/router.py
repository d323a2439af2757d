from fastapi import APIRouter
from budgetdash.api.routers import auth, admin, divisions, merge_rules, pricing, facts, budgets, imports, reports

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(divisions.router, prefix="/divisions", tags=["divisions"])
api_router.include_router(merge_rules.router, prefix="/merge-rules", tags=["merge-rules"])
api_router.include_router(pricing.router, prefix="/pricing", tags=["pricing"])
api_router.include_router(facts.router, prefix="/facts", tags=["facts"])
api_router.include_router(budgets.router, prefix="/budgets", tags=["budgets"])
api_router.include_router(imports.router, prefix="/imports", tags=["imports"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
