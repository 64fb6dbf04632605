# src/task_service/api/routes.py

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, Response

from ..core.state import AppState
from ..tasks.task_service import TaskService
from .schemas import ErrorOut, TaskCreate, TaskOut, TaskPageOut, TaskPatch, page_to_out, task_to_out

router = APIRouter(prefix="/tasks", tags=["tasks"])

_400 = {400: {"model": ErrorOut}}
_404 = {404: {"model": ErrorOut}}


def get_app_state(request: Request) -> AppState:
    return request.app.state.app_state


def get_task_service(state: AppState = Depends(get_app_state)) -> TaskService:
    return state.tasks


@router.get("", response_model=TaskPageOut, responses=_400)
def list_tasks(
    service: TaskService = Depends(get_task_service),
    status: str | None = Query(default=None, description="pending, in-progress, completed, complete or incomplete"),
    search: str | None = Query(default=None, description="Substring of title or description"),
    page_number: int = Query(default=1, alias="pageNumber"),
    page_size: int | None = Query(default=None, alias="pageSize"),
) -> TaskPageOut:
    page = service.list_tasks(
        status=status,
        search=search,
        page_number=page_number,
        page_size=page_size,
    )
    return page_to_out(page)


@router.get("/{task_id}", response_model=TaskOut, responses=_404)
def get_task(task_id: str, service: TaskService = Depends(get_task_service)) -> TaskOut:
    return task_to_out(service.get_task(task_id))


@router.post("", response_model=TaskOut, status_code=201, responses=_400)
def create_task(
    body: TaskCreate,
    request: Request,
    response: Response,
    service: TaskService = Depends(get_task_service),
) -> TaskOut:
    task = service.create_task(
        title=body.title,
        description=body.description,
        due_date=body.due_date,
        status=body.status,
    )
    response.headers["Location"] = str(request.url_for("get_task", task_id=task.id))
    return task_to_out(task)


@router.put("/{task_id}", response_model=TaskOut, responses={**_400, **_404})
def put_task(
    task_id: str,
    body: TaskPatch,
    state: AppState = Depends(get_app_state),
) -> TaskOut:
    """
    Update a task.

    With TASK_SERVICE_PUT_MODE=partial (default) only fields present in the
    body change; with `replace` every mutable field is overwritten.
    """
    if getattr(state.settings, "put_mode", "partial") == "replace":
        task = state.tasks.replace_task(
            task_id,
            title=body.title,
            description=body.description,
            due_date=body.due_date,
            status=body.status,
        )
    else:
        task = state.tasks.update_task(task_id, body.changes())
    return task_to_out(task)


@router.patch("/{task_id}", response_model=TaskOut, responses={**_400, **_404})
def patch_task(
    task_id: str,
    body: TaskPatch,
    service: TaskService = Depends(get_task_service),
) -> TaskOut:
    return task_to_out(service.update_task(task_id, body.changes()))


@router.patch("/{task_id}/complete", response_model=TaskOut, responses=_404)
def mark_complete(task_id: str, service: TaskService = Depends(get_task_service)) -> TaskOut:
    return task_to_out(service.mark_complete(task_id))


@router.patch("/{task_id}/incomplete", response_model=TaskOut, responses=_404)
def mark_incomplete(task_id: str, service: TaskService = Depends(get_task_service)) -> TaskOut:
    return task_to_out(service.mark_incomplete(task_id))


@router.delete("/{task_id}", status_code=204, response_class=Response, responses=_404)
def delete_task(task_id: str, service: TaskService = Depends(get_task_service)) -> Response:
    service.delete_task(task_id)
    return Response(status_code=204)
