from sqlalchemy import Column, DateTime, ForeignKey, Integer, func
from sqlalchemy.orm import relationship

from jwt_pizza.core.database import Base


class DinerOrder(Base):
    __tablename__ = "dinerOrder"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    diner_id = Column("dinerId", Integer, ForeignKey("user.id"), index=True, nullable=False)
    # sem FK para franchise/store: pedidos históricos sobrevivem à exclusão da franquia
    franchise_id = Column("franchiseId", Integer, index=True, nullable=False)
    store_id = Column("storeId", Integer, index=True, nullable=False)
    date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
        lazy="selectin",
    )
