from fastapi import APIRouter

from dossier_engine.api.v1.endpoints import dossiers, persons, relationships

# Create API router
api_router = APIRouter()

api_router.include_router(dossiers.router, prefix="/dossiers", tags=["Dossiers"])
api_router.include_router(persons.router, prefix="/persons", tags=["Persons"])
api_router.include_router(relationships.router, prefix="/relationships", tags=["Relationships"])

__all__ = ["api_router"]
