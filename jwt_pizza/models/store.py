from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from jwt_pizza.core.database import Base


class Store(Base):
    __tablename__ = "store"
    # ids nunca são reaproveitados: pedidos guardam storeId sem FK
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    franchise_id = Column("franchiseId", Integer, ForeignKey("franchise.id"), index=True, nullable=False)
    name = Column(String(255), nullable=False)

    franchise = relationship("Franchise", back_populates="stores")
