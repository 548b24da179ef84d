"""
Hunt API endpoints.

The remote authority the offline client syncs against: plain CRUD over
shiny hunts with partial, field-overwrite updates.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from shinytracker.db import create_hunt, delete_hunt, list_hunts, update_hunt
from shinytracker.db.database import get_session

router = APIRouter(prefix="/api/hunts", tags=["hunts"])


class HuntResponse(BaseModel):
    """A stored hunt."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    species_name: str
    game: str
    sprite_url: str = ""
    types: list[str] = Field(default_factory=list)
    encounter_count: int = 0
    target_count: int | None = None
    started_at: datetime
    completed: bool = False
    completed_at: datetime | None = None


class HuntCreateRequest(BaseModel):
    """Request model for starting a hunt."""

    species_name: str = Field(..., min_length=1, max_length=100, examples=["pikachu"])
    game: str = Field(..., min_length=1, max_length=100, examples=["Yellow"])
    sprite_url: str = ""
    types: list[str] = Field(default_factory=list, examples=[["electric"]])
    target_count: int | None = Field(default=None, gt=0)


class HuntUpdateRequest(BaseModel):
    """
    Partial update. Only fields present in the body are written; an
    explicit null (e.g. completed_at) clears the column.
    """

    encounter_count: int | None = Field(default=None, ge=0)
    completed: bool | None = None
    completed_at: datetime | None = None
    target_count: int | None = Field(default=None, gt=0)

    @field_validator("encounter_count", "completed")
    @classmethod
    def not_null(cls, value: int | bool | None) -> int | bool:
        """These columns may be omitted but never cleared."""
        if value is None:
            raise ValueError("may not be null")
        return value


class DeleteResponse(BaseModel):
    success: bool


@router.get("", response_model=list[HuntResponse])
async def get_hunts(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[HuntResponse]:
    """List every hunt, newest first."""
    hunts = await list_hunts(session)
    return [HuntResponse.model_validate(hunt) for hunt in hunts]


@router.post("", response_model=HuntResponse)
async def post_hunt(
    request: HuntCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HuntResponse:
    """Start a hunt. The server assigns id and started_at."""
    hunt = await create_hunt(
        session,
        species_name=request.species_name,
        game=request.game,
        sprite_url=request.sprite_url,
        types=request.types,
        target_count=request.target_count,
    )
    return HuntResponse.model_validate(hunt)


@router.put("/{hunt_id}", response_model=HuntResponse)
async def put_hunt(
    hunt_id: int,
    request: HuntUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HuntResponse:
    """Overwrite the given fields of a hunt."""
    fields = request.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )

    hunt = await update_hunt(session, hunt_id, fields)
    if hunt is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Hunt {hunt_id} not found",
        )
    return HuntResponse.model_validate(hunt)


@router.delete("/{hunt_id}", response_model=DeleteResponse)
async def remove_hunt(
    hunt_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    """Delete a hunt. Deleting a missing hunt also succeeds."""
    await delete_hunt(session, hunt_id)
    return DeleteResponse(success=True)
