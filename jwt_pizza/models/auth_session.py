from sqlalchemy import Column, ForeignKey, Integer, String

from jwt_pizza.core.database import Base


class AuthSession(Base):
    __tablename__ = "auth"

    # assinatura do JWT (terceiro segmento), não o token inteiro
    token = Column(String(512), primary_key=True)
    # sem relationship: apagar a sessão nunca apaga o usuário
    user_id = Column("userId", Integer, ForeignKey("user.id"), index=True, nullable=False)
