from fastapi import APIRouter


router = APIRouter()


@router.get("/health")
def health() -> dict:
    """Liveness check - always returns 200 if app is running."""
    return {"status": "ok"}
