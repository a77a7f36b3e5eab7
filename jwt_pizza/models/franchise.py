from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from jwt_pizza.core.database import Base


class Franchise(Base):
    __tablename__ = "franchise"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    name = Column(String(255), unique=True, nullable=False)

    stores = relationship("Store", back_populates="franchise", order_by="Store.id")
