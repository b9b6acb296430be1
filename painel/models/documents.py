import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text

from painel.core.db import Base


def _new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    uid = Column(String(32), primary_key=True, default=_new_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    criado_em = Column(DateTime(timezone=True), default=utcnow)


class ChamadoDocument(Base):
    """
    One ticket inside a user's partition. Timestamps are assigned by the
    document store at write time, never by the caller.
    """
    __tablename__ = "chamados"

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(String(32), ForeignKey("users.uid", ondelete="CASCADE"), nullable=False, index=True)

    motivo = Column(Text, nullable=False)
    cliente = Column(String(255), nullable=True)
    cliente_id = Column(String(32), nullable=True, index=True)
    cliente_nome = Column(String(255), nullable=True)
    descricao = Column(Text, nullable=True)
    data = Column(String(10), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="aberto", index=True)
    resolucao = Column(Text, nullable=False, default="")
    tipo_cadastro = Column(String(10), nullable=False, default="novo")

    criado_em = Column(DateTime(timezone=True), nullable=True)
    concluido_em = Column(DateTime(timezone=True), nullable=True)


class ClienteDocument(Base):
    __tablename__ = "clientes"

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(String(32), ForeignKey("users.uid", ondelete="CASCADE"), nullable=False, index=True)

    nome = Column(String(255), nullable=False)
    telefone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    observacao = Column(Text, nullable=True)
    ativo = Column(Boolean, nullable=False, default=True)

    criado_em = Column(DateTime(timezone=True), nullable=True)
    atualizado_em = Column(DateTime(timezone=True), nullable=True)
