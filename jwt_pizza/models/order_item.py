from sqlalchemy import Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from jwt_pizza.core.database import Base


class OrderItem(Base):
    __tablename__ = "orderItem"

    id = Column(Integer, primary_key=True)
    order_id = Column("orderId", Integer, ForeignKey("dinerOrder.id"), index=True, nullable=False)
    menu_id = Column("menuId", Integer, ForeignKey("menu.id"), nullable=False)
    # snapshot no momento do pedido
    description = Column(String(1024), nullable=False)
    price = Column(Numeric(10, 8, asdecimal=False), nullable=False)

    order = relationship("DinerOrder", back_populates="items")
