from sqlalchemy import Column, Integer, Numeric, String

from jwt_pizza.core.database import Base


class MenuItem(Base):
    __tablename__ = "menu"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(String(1024), nullable=False, default="")
    image = Column(String(1024), nullable=False, default="")
    price = Column(Numeric(10, 8, asdecimal=False), nullable=False)
