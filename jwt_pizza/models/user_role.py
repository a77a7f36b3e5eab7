from sqlalchemy import Column, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from jwt_pizza.core.database import Base


class UserRole(Base):
    __tablename__ = "userRole"
    __table_args__ = (Index("ix_userRole_objectId", "objectId"),)

    id = Column(Integer, primary_key=True)
    user_id = Column("userId", Integer, ForeignKey("user.id"), index=True, nullable=False)
    role = Column(String(255), nullable=False)  # diner | admin | franchisee
    object_id = Column("objectId", Integer, nullable=False, default=0)

    user = relationship("User", back_populates="roles")
