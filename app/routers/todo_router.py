from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.identity import AuthenticatedUser, get_current_user
from app.schemas.todo import TodoCreate, TodoOut, TodoPage, TodoUpdate
from app.services.todo_service import TodoService

router = APIRouter()
service = TodoService()


@router.get("", response_model=TodoPage)
async def list_todos(
    page: int = Query(1, ge=1),
    search: str = Query(""),
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_todos(db, user.id, page=page, search=search)


@router.post("", response_model=TodoOut, status_code=201)
async def create_todo(
    todo_in: TodoCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await service.create_todo(db, user.id, todo_in)


@router.put("/{todo_id}", response_model=TodoOut)
async def update_todo(
    todo_id: str,
    todo_in: TodoUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await service.update_todo(db, user.id, todo_id, todo_in)


@router.delete("/{todo_id}", status_code=204)
async def delete_todo(
    todo_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await service.delete_todo(db, user.id, todo_id)
    return Response(status_code=204)
