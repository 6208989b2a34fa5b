from typing import Generic, TypeVar, Type, Optional, Any, Dict
from sqlalchemy.orm import Session
from sqlalchemy import select
from pydantic import BaseModel
from bizcards.database import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Company-owned rows addressed by (id, company_id).

    The company id always comes from the caller's session via the service
    layer, so a row of another company reads as missing.

    Type Parameters:
        ModelType: SQLAlchemy model with a non-null ``company_id`` column
        CreateSchemaType: Pydantic schema for new rows
        UpdateSchemaType: Pydantic schema for partial updates
    """

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def get(self, db: Session, id: str, company_id: str) -> Optional[ModelType]:
        stmt = select(self.model).where(
            self.model.id == id,
            self.model.company_id == company_id
        )
        return db.execute(stmt).scalar_one_or_none()

    def create(self, db: Session, *, obj_in: CreateSchemaType, company_id: str) -> ModelType:
        db_obj = self.model(company_id=company_id, **obj_in.model_dump())
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(self, db: Session, *, db_obj: ModelType, update_data: Dict[str, Any]) -> ModelType:
        """
        Apply already-validated fields to a row fetched with get().

        Args:
            db: Database session
            db_obj: Row owned by the caller's company
            update_data: Column values to set; absent keys keep their value
        """
        for column, value in update_data.items():
            setattr(db_obj, column, value)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, *, id: str, company_id: str) -> Optional[ModelType]:
        """Remove a row; returns None when the company has no such row."""
        db_obj = self.get(db=db, id=id, company_id=company_id)
        if db_obj is None:
            return None
        db.delete(db_obj)
        db.commit()
        return db_obj
