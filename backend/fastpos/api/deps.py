"""
FastAPI dependencies
"""
from fastapi import HTTPException, Request, status

from fastpos.services.pos import PointOfSale


def get_pos(request: Request) -> PointOfSale:
    """
    FastAPI dependency returning the running PointOfSale

    Usage:
        @router.get("/")
        def list_things(pos: PointOfSale = Depends(get_pos)):
            ...
    """
    pos = getattr(request.app.state, "pos", None)
    if pos is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="POS not started")
    return pos
