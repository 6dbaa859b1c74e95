from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from curalink.api.dependencies import current_principal
from curalink.application.services.favorites_service import FavoritesService
from curalink.domain.identity import Principal

router = APIRouter()

_favorites_service = FavoritesService()


class FavoriteRequest(BaseModel):
    kind: Optional[str] = None
    itemId: Optional[str] = None


@router.get("/favorites")
def list_favorites(principal: Principal = Depends(current_principal)):
    return _favorites_service.list(principal)


@router.post("/favorites")
def add_favorite(req: FavoriteRequest, principal: Principal = Depends(current_principal)):
    _favorites_service.add(principal, req.kind, req.itemId)
    return {"ok": True}


@router.delete("/favorites")
def remove_favorite(req: FavoriteRequest, principal: Principal = Depends(current_principal)):
    _favorites_service.remove(principal, req.kind, req.itemId)
    return {"ok": True}
