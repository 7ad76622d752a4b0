"""Board routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response

from ..deps import CurrentUser, Db, get_owned_board
from . import service
from .models import BoardCreate, BoardResponse, BoardUpdate

router = APIRouter(prefix="/api/boards", tags=["boards"])


@router.get("", response_model=list[BoardResponse])
async def list_boards(user: CurrentUser, db: Db):
    return await service.list_boards(db, user)


@router.post("", response_model=BoardResponse, status_code=201)
async def create_board(body: BoardCreate, user: CurrentUser, db: Db, response: Response):
    try:
        board = await service.create_board(db, body.title, body.description, user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    response.headers["Location"] = f"/api/boards/{board['id']}"
    return board


@router.get("/{board_id}", response_model=BoardResponse)
async def get_board(board_id: str, user: CurrentUser, db: Db):
    return await get_owned_board(db, board_id, user)


@router.patch("/{board_id}", response_model=BoardResponse)
async def update_board(board_id: str, body: BoardUpdate, user: CurrentUser, db: Db):
    board = await get_owned_board(db, board_id, user)
    try:
        updated = await service.update_board(db, board["id"], body.model_dump(exclude_none=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    if updated is None:
        raise HTTPException(status_code=404, detail="Board not found")
    return updated


@router.delete("/{board_id}", status_code=204)
async def delete_board(board_id: str, user: CurrentUser, db: Db):
    board = await get_owned_board(db, board_id, user)
    if not await service.delete_board(db, board["id"]):
        raise HTTPException(status_code=404, detail="Board not found")
    return Response(status_code=204)
