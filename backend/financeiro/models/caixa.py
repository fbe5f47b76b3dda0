"""
Modelo SQLAlchemy da sessão de caixa diária
"""

from sqlalchemy import (
    Column, Integer, String, DateTime, Date, Float, Text, UniqueConstraint
)
from sqlalchemy.orm import relationship

from financeiro.core.datas import agora
from financeiro.models.base import Base


class SessaoCaixa(Base):
    """Caixa de um dia (tenant + data local); no máximo uma por dia"""

    __tablename__ = "sessoes_caixa"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    data = Column(Date, nullable=False)

    # Abertura
    aberto_em = Column(DateTime, nullable=True)
    aberto_por = Column(String(64), nullable=True)
    valor_abertura = Column(Float, default=0.0, nullable=False)

    # Fechamento
    fechado_em = Column(DateTime, nullable=True)
    fechado_por = Column(String(64), nullable=True)
    saldo_esperado = Column(Float, nullable=True)
    saldo_contado = Column(Float, nullable=True)
    diferenca = Column(Float, nullable=True)
    observacoes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=agora, nullable=False)

    movimentos = relationship("Transacao", back_populates="sessao_caixa")

    __table_args__ = (
        UniqueConstraint("tenant_id", "data", name="uq_sessoes_caixa_tenant_data"),
    )

    @property
    def aberto(self) -> bool:
        return self.aberto_em is not None

    @property
    def fechado(self) -> bool:
        return self.fechado_em is not None
