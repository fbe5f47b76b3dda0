"""
Modelo SQLAlchemy de agendamento (só o que o financeiro usa)
"""

from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey, Text
from sqlalchemy.orm import relationship

from financeiro.core.datas import agora
from financeiro.core.enums import StatusAgendamento
from financeiro.models.base import Base


class Agendamento(Base):
    """Atendimento marcado para um cliente"""

    __tablename__ = "agendamentos"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), nullable=False, index=True)

    cliente_id = Column(Integer, ForeignKey("clientes.id"), nullable=False)
    pacote_id = Column(Integer, ForeignKey("pacotes.id"), nullable=True)
    compra_pacote_id = Column(
        Integer, ForeignKey("compras_pacotes.id", ondelete="SET NULL"), nullable=True
    )
    profissional_id = Column(String(64), nullable=True)

    data_hora = Column(DateTime, nullable=False)
    status = Column(String(30), default=StatusAgendamento.AGENDADO.value, nullable=False)
    observacoes = Column(Text, default="", nullable=False)

    # Serviço avulso (sem pacote)
    servico_avulso_nome = Column(String(255), nullable=True)
    servico_avulso_valor = Column(Float, nullable=True)

    # Financeiro
    valor_cobrado = Column(Float, nullable=True)
    status_pagamento = Column(String(20), nullable=True)

    created_at = Column(DateTime, default=agora, nullable=False)
    updated_at = Column(DateTime, default=agora, onupdate=agora, nullable=False)

    cliente = relationship("Cliente")
    pacote = relationship("Pacote")
    compra_pacote = relationship("CompraPacote")
