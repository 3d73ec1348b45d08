# infrastructure/store/sql/models.py
#
# Description:
# ORM mapping of the relational tables that search and reconciliation read.
# Only the columns the search projection needs are mapped.

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, Enum as SQLAEnum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.domain.models import Cuisine, Difficulty
from infrastructure.store.sql.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    username: Mapped[str] = mapped_column(String, unique=True)
    first_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    avatar: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)

    recipes: Mapped[List["RecipeModel"]] = relationship(back_populates="author")


class RecipeModel(Base):
    __tablename__ = "recipes"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cuisine: Mapped[Optional[Cuisine]] = mapped_column(SQLAEnum(Cuisine), nullable=True)
    difficulty: Mapped[Optional[Difficulty]] = mapped_column(SQLAEnum(Difficulty), nullable=True)
    cooking_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    servings: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    author_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now)

    author: Mapped["UserModel"] = relationship(back_populates="recipes")
    ingredients: Mapped[List["IngredientModel"]] = relationship(
        back_populates="recipe", cascade="all, delete-orphan", order_by="IngredientModel.position"
    )
    instructions: Mapped[List["InstructionModel"]] = relationship(
        back_populates="recipe", cascade="all, delete-orphan", order_by="InstructionModel.step_number"
    )
    ratings: Mapped[List["RatingModel"]] = relationship(back_populates="recipe", cascade="all, delete-orphan")
    comments: Mapped[List["CommentModel"]] = relationship(back_populates="recipe", cascade="all, delete-orphan")


class IngredientModel(Base):
    __tablename__ = "ingredients"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    recipe_id: Mapped[str] = mapped_column(ForeignKey("recipes.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String, index=True)
    quantity: Mapped[float] = mapped_column(Float)
    unit: Mapped[str] = mapped_column(String)
    notes: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    position: Mapped[int] = mapped_column(Integer, default=0)  # Order within the recipe

    recipe: Mapped["RecipeModel"] = relationship(back_populates="ingredients")


class InstructionModel(Base):
    __tablename__ = "instructions"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    recipe_id: Mapped[str] = mapped_column(ForeignKey("recipes.id", ondelete="CASCADE"), index=True)
    step_number: Mapped[int] = mapped_column(Integer)
    description: Mapped[str] = mapped_column(Text)

    recipe: Mapped["RecipeModel"] = relationship(back_populates="instructions")


class RatingModel(Base):
    __tablename__ = "ratings"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    recipe_id: Mapped[str] = mapped_column(ForeignKey("recipes.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"))
    value: Mapped[int] = mapped_column(Integer)  # 1..5
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)

    recipe: Mapped["RecipeModel"] = relationship(back_populates="ratings")


class CommentModel(Base):
    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    recipe_id: Mapped[str] = mapped_column(ForeignKey("recipes.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"))
    content: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)

    recipe: Mapped["RecipeModel"] = relationship(back_populates="comments")
