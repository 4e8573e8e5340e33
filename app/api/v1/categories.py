"""
Category API endpoints
"""
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.application.categories import (
    CreateCategoryUseCase, UpdateCategoryUseCase, DeleteCategoryUseCase,
)
from app.infrastructure.db.models import Category


router = APIRouter(prefix="/categories", tags=["categories"])


class CreateCategoryRequest(BaseModel):
    name: str = Field(min_length=1)
    type: str  # income, expense
    icon: str | None = None
    color: str | None = None
    group: str = "wants"  # needs, wants, savings


class UpdateCategoryRequest(BaseModel):
    name: str | None = None
    type: str | None = None
    icon: str | None = None
    color: str | None = None
    group: str | None = None


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: str
    icon: str | None = None
    color: str | None = None
    group: str


@router.get("")
def list_categories(db: Session = Depends(get_db)):
    """Категории: по типу, группе, названию"""
    categories = db.query(Category).order_by(
        Category.type.asc(), Category.group.asc(), Category.name.asc()
    ).all()
    return {"success": True, "data": [CategoryResponse.model_validate(c) for c in categories]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_category(req: CreateCategoryRequest, db: Session = Depends(get_db)):
    category = CreateCategoryUseCase(db).execute(
        name=req.name,
        type=req.type,
        icon=req.icon,
        color=req.color,
        group=req.group,
    )
    return {"success": True, "data": CategoryResponse.model_validate(category)}


@router.put("/{category_id}")
def update_category(category_id: str, req: UpdateCategoryRequest, db: Session = Depends(get_db)):
    category = UpdateCategoryUseCase(db).execute(category_id, **req.model_dump(exclude_unset=True))
    return {"success": True, "data": CategoryResponse.model_validate(category)}


@router.delete("/{category_id}")
def delete_category(category_id: str, db: Session = Depends(get_db)):
    """Удалить категорию (400, если используется в операциях)"""
    DeleteCategoryUseCase(db).execute(category_id)
    return {"success": True}
