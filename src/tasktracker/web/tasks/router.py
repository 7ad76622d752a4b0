"""Task routes.

Every successful create or update is pushed to the board's live
subscribers once the change is committed.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Response

from ..deps import CurrentUser, Db, HubDep, get_owned_board
from . import service
from .models import TaskCreate, TaskResponse, TaskUpdate

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


async def _get_owned_task(db, task_id: str, user_id: str) -> dict:
    task = await service.get_task(db, task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    await get_owned_board(db, task["board_id"], user_id)
    return task


@router.get("", response_model=list[TaskResponse])
async def list_tasks(user: CurrentUser, db: Db, board_id: str = Query(...)):
    board = await get_owned_board(db, board_id, user)
    return await service.list_tasks(db, board["id"])


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(body: TaskCreate, user: CurrentUser, db: Db, hub: HubDep, response: Response):
    board = await get_owned_board(db, body.board_id, user)
    try:
        task = await service.create_task(
            db,
            board_id=board["id"],
            title=body.title,
            description=body.description,
            status=body.status,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None

    await hub.broadcast(board["id"], task["id"], task["title"], task["status"])
    response.headers["Location"] = f"/api/tasks/{task['id']}"
    return task


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, user: CurrentUser, db: Db):
    return await _get_owned_task(db, task_id, user)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(task_id: str, body: TaskUpdate, user: CurrentUser, db: Db, hub: HubDep):
    existing = await _get_owned_task(db, task_id, user)
    try:
        task = await service.update_task(db, task_id, body.model_dump(exclude_none=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")

    await hub.broadcast(existing["board_id"], task["id"], task["title"], task["status"])
    return task


@router.delete("/{task_id}", status_code=204)
async def delete_task(task_id: str, user: CurrentUser, db: Db):
    await _get_owned_task(db, task_id, user)
    if not await service.delete_task(db, task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return Response(status_code=204)
