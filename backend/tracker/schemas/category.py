from pydantic import BaseModel, Field, field_validator

from ..models.category import CategoryType


class CategoryBase(BaseModel):
    """Base category fields."""
    name: str = Field(min_length=1, max_length=255)
    icon: str = "Tag"
    color: str = "#64748b"
    type: CategoryType = CategoryType.EXPENSE

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class CategoryCreate(CategoryBase):
    """Fields for creating a category."""
    pass


class CategoryResponse(CategoryBase):
    """Category response with all fields."""
    id: int

    class Config:
        from_attributes = True
