"""
Modelos SQLAlchemy de cadastro (clientes e pacotes)

Só os campos que o financeiro consome; o cadastro completo vive no
serviço de clientes.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, Text

from financeiro.core.datas import agora
from financeiro.models.base import Base


class Cliente(Base):
    """Cliente do salão"""

    __tablename__ = "clientes"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    nome = Column(String(255), nullable=False)
    telefone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=agora, nullable=False)


class Pacote(Base):
    """Definição de pacote vendável (ex: 10 sessões de drenagem)"""

    __tablename__ = "pacotes"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    nome = Column(String(255), nullable=False)
    categoria = Column(String(100), nullable=False)
    sessoes = Column(Integer, nullable=False)
    valor = Column(Float, nullable=False)
    descricao = Column(Text, nullable=True)
    ativo = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=agora, nullable=False)

    @property
    def valor_por_sessao(self) -> float:
        if not self.sessoes:
            return 0.0
        return self.valor / self.sessoes
