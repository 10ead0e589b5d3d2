from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel, Field

from coursehub.api.dependencies import CurrentUser, RepoDep
from coursehub.api.schemas import ModuleOut, module_out
from coursehub.services import enrollment_service, module_service

router = APIRouter(prefix="/modules", tags=["modules"])


class ModulePatch(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    content: dict[str, Any] | None = None
    order: int | None = Field(default=None, ge=0)
    duration: int | None = Field(default=None, ge=0)


class CompletionOut(BaseModel):
    progress: int
    completed: bool


@router.get("/{module_id}", response_model=ModuleOut)
async def get_module(module_id: UUID, principal: CurrentUser, repos: RepoDep) -> ModuleOut:
    return module_out(await module_service.get_module(repos, principal, module_id))


@router.patch("/{module_id}", response_model=ModuleOut)
async def update_module(
    module_id: UUID, payload: ModulePatch, principal: CurrentUser, repos: RepoDep
) -> ModuleOut:
    changes = payload.model_dump(exclude_unset=True)
    # an explicit null leaves these fields alone
    for key in ("title", "order", "content", "duration"):
        if key in changes and changes[key] is None:
            del changes[key]
    module = await module_service.update_module(repos, principal, module_id, changes)
    return module_out(module)


@router.post("/{module_id}/complete", response_model=CompletionOut)
async def complete_module(
    module_id: UUID, principal: CurrentUser, repos: RepoDep
) -> CompletionOut:
    result = await enrollment_service.complete_module(repos, principal, module_id)
    return CompletionOut(progress=result.progress, completed=result.completed)
