from fastapi import APIRouter
from scoped_query.api import search

router = APIRouter()
router.include_router(search.router, tags=["ScopedSearch"])
