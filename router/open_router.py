from fastapi import APIRouter

# routers
from modules.lookup import lookup_router


# storefront-facing routes, no session required
# the lookup route binds its own DB context so preflights skip it
OpenRouter = APIRouter()


OpenRouter.include_router(lookup_router)
