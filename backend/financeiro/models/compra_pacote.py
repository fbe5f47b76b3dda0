"""
Modelos SQLAlchemy de compra de pacote, histórico de uso e eventos
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Float, ForeignKey, Text, Index
)
from sqlalchemy.orm import relationship

from financeiro.core.datas import agora
from financeiro.core.enums import StatusCompraPacote, TipoEventoCompra
from financeiro.core.exceptions import ErroEstado, ErroValidacao
from financeiro.models.base import Base, arredondar


class CompraPacote(Base):
    """Pacote de sessões comprado por um cliente"""

    __tablename__ = "compras_pacotes"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), nullable=False, index=True)

    cliente_id = Column(Integer, ForeignKey("clientes.id"), nullable=False)
    pacote_id = Column(Integer, ForeignKey("pacotes.id"), nullable=False)

    # Controle de sessões
    sessoes_contratadas = Column(Integer, nullable=False)
    sessoes_usadas = Column(Integer, default=0, nullable=False)
    sessoes_restantes = Column(Integer, nullable=False, default=0)

    # Valores
    valor_total = Column(Float, nullable=False)
    valor_pago = Column(Float, default=0.0, nullable=False)
    valor_pendente = Column(Float, nullable=False, default=0.0)

    # Parcelamento
    parcelado = Column(Boolean, default=False, nullable=False)
    numero_parcelas = Column(Integer, default=1, nullable=False)
    parcelas_pagas = Column(Integer, default=0, nullable=False)
    valor_parcela = Column(Float, default=0.0, nullable=False)

    # Status e datas
    status = Column(String(20), default=StatusCompraPacote.ATIVO.value, nullable=False)
    data_compra = Column(DateTime, default=agora, nullable=False)
    data_expiracao = Column(DateTime, nullable=True)
    dias_validade = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=agora, nullable=False)
    updated_at = Column(DateTime, default=agora, onupdate=agora, nullable=False)

    cliente = relationship("Cliente")
    pacote = relationship("Pacote")
    historico = relationship(
        "UsoSessao",
        back_populates="compra_pacote",
        cascade="all, delete-orphan",
        order_by="UsoSessao.numero_da_sessao",
    )
    eventos = relationship(
        "EventoCompraPacote",
        back_populates="compra_pacote",
        cascade="all, delete-orphan",
        order_by="EventoCompraPacote.id",
    )

    __table_args__ = (
        Index("ix_compras_tenant_status", "tenant_id", "status"),
        Index("ix_compras_tenant_cliente_status", "tenant_id", "cliente_id", "status"),
        Index("ix_compras_tenant_expiracao_status", "tenant_id", "data_expiracao", "status"),
    )

    @property
    def extensoes(self):
        return [e for e in self.eventos if e.tipo == TipoEventoCompra.EXTENSAO.value]

    def esta_expirada(self, momento: Optional[datetime] = None) -> bool:
        momento = momento or agora()
        return self.data_expiracao is not None and momento > self.data_expiracao

    def recalcular(self, momento: Optional[datetime] = None):
        """Campos derivados e transições automáticas; chamado antes de cada flush"""
        if not self.sessoes_contratadas or self.sessoes_contratadas < 1:
            raise ErroValidacao("Deve ter pelo menos 1 sessão")
        if (self.sessoes_usadas or 0) > self.sessoes_contratadas:
            raise ErroEstado("Sessões usadas excedem as contratadas")
        if not 1 <= (self.numero_parcelas or 1) <= 12:
            raise ErroValidacao("Número de parcelas deve estar entre 1 e 12")

        self.sessoes_usadas = self.sessoes_usadas or 0
        self.sessoes_restantes = self.sessoes_contratadas - self.sessoes_usadas

        self.valor_pago = arredondar(self.valor_pago)
        self.valor_pendente = arredondar(self.valor_total - self.valor_pago)

        if self.parcelado and self.numero_parcelas > 0:
            self.valor_parcela = self.valor_total / self.numero_parcelas

        if self.id is None and self.dias_validade and self.data_expiracao is None:
            self.data_expiracao = (self.data_compra or agora()) + timedelta(days=self.dias_validade)

        if self.status == StatusCompraPacote.ATIVO.value and self.esta_expirada(momento):
            self.status = StatusCompraPacote.EXPIRADO.value

        if self.status == StatusCompraPacote.ATIVO.value and self.sessoes_restantes == 0:
            self.status = StatusCompraPacote.CONCLUIDO.value

    # ------------------------------------------------------------------
    # Sessões
    # ------------------------------------------------------------------

    def validar_uso(self, momento: Optional[datetime] = None):
        """Garante que uma sessão pode ser consumida.

        Um pacote vencido passa a Expirado aqui mesmo, antes do erro.
        """
        if self.sessoes_restantes is None or self.sessoes_restantes <= 0:
            raise ErroEstado("Pacote não possui sessões restantes")

        if self.status != StatusCompraPacote.ATIVO.value:
            raise ErroEstado(f"Pacote não está ativo (status: {self.status})")

        if self.esta_expirada(momento):
            self.status = StatusCompraPacote.EXPIRADO.value
            raise ErroEstado("Pacote expirado")

    def usar_sessao(
        self,
        agendamento_id: Optional[int],
        valor_cobrado: float,
        profissional_id: Optional[str] = None,
        momento: Optional[datetime] = None,
    ) -> "CompraPacote":
        """Consome uma sessão em memória (o serviço persiste de forma atômica)"""
        self.validar_uso(momento)

        self.sessoes_usadas += 1
        self.sessoes_restantes -= 1
        self.registrar_uso(agendamento_id, valor_cobrado, profissional_id, momento)
        return self

    def registrar_uso(
        self,
        agendamento_id: Optional[int],
        valor_cobrado: float,
        profissional_id: Optional[str] = None,
        momento: Optional[datetime] = None,
    ):
        """Anexa ao histórico a sessão de número `sessoes_usadas`"""
        self.historico.append(
            UsoSessao(
                agendamento_id=agendamento_id,
                data_sessao=momento or agora(),
                valor_cobrado=arredondar(valor_cobrado),
                numero_da_sessao=self.sessoes_usadas,
                profissional_id=profissional_id,
            )
        )
        if self.sessoes_restantes == 0 and self.status == StatusCompraPacote.ATIVO.value:
            self.status = StatusCompraPacote.CONCLUIDO.value

    def estender_prazo(
        self,
        dias: int,
        motivo: Optional[str] = None,
        realizado_por: Optional[str] = None,
        momento: Optional[datetime] = None,
    ) -> "CompraPacote":
        if not dias or dias <= 0:
            raise ErroValidacao("Número de dias deve ser maior que zero")

        data_anterior = self.data_expiracao
        nova_data = (self.data_expiracao or momento or agora()) + timedelta(days=dias)
        self.data_expiracao = nova_data

        self.eventos.append(
            EventoCompraPacote(
                tipo=TipoEventoCompra.EXTENSAO.value,
                data_anterior=data_anterior,
                nova_data=nova_data,
                motivo=motivo,
                realizado_por=realizado_por,
            )
        )

        if self.status == StatusCompraPacote.EXPIRADO.value and self.sessoes_restantes > 0:
            self.status = StatusCompraPacote.ATIVO.value

        return self

    # ------------------------------------------------------------------
    # Pagamentos
    # ------------------------------------------------------------------

    def registrar_pagamento(self, valor: float) -> "CompraPacote":
        if valor is None or valor <= 0:
            raise ErroValidacao("Valor do pagamento deve ser maior que zero")

        self.valor_pago = arredondar((self.valor_pago or 0) + valor)
        self.valor_pendente = arredondar(self.valor_total - self.valor_pago)
        self._atualizar_parcelas_pagas()
        return self

    def estornar_pagamento(self, valor: float) -> "CompraPacote":
        self.valor_pago = max(0.0, arredondar((self.valor_pago or 0) - valor))
        self.valor_pendente = arredondar(self.valor_total - self.valor_pago)
        self._atualizar_parcelas_pagas()
        return self

    def _atualizar_parcelas_pagas(self):
        if self.parcelado and self.numero_parcelas:
            self.valor_parcela = self.valor_total / self.numero_parcelas
            if self.valor_parcela > 0:
                self.parcelas_pagas = int(self.valor_pago // self.valor_parcela)

    def cancelar(self, motivo: str = "", realizado_por: Optional[str] = None) -> "CompraPacote":
        self.status = StatusCompraPacote.CANCELADO.value

        if motivo:
            self.eventos.append(
                EventoCompraPacote(
                    tipo=TipoEventoCompra.CANCELAMENTO.value,
                    data_anterior=self.data_expiracao,
                    nova_data=self.data_expiracao,
                    motivo=motivo,
                    realizado_por=realizado_por,
                )
            )

        return self


class UsoSessao(Base):
    """Uma sessão consumida de um pacote (histórico append-only)"""

    __tablename__ = "compras_pacotes_historico"

    id = Column(Integer, primary_key=True, index=True)
    compra_pacote_id = Column(
        Integer, ForeignKey("compras_pacotes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    agendamento_id = Column(Integer, nullable=True)
    data_sessao = Column(DateTime, nullable=False)
    valor_cobrado = Column(Float, nullable=False)
    numero_da_sessao = Column(Integer, nullable=False)
    profissional_id = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=agora, nullable=False)

    compra_pacote = relationship("CompraPacote", back_populates="historico")


class EventoCompraPacote(Base):
    """Evento da compra: extensão de prazo ou cancelamento"""

    __tablename__ = "compras_pacotes_eventos"

    id = Column(Integer, primary_key=True, index=True)
    compra_pacote_id = Column(
        Integer, ForeignKey("compras_pacotes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tipo = Column(String(20), nullable=False)  # extensao | cancelamento
    data_anterior = Column(DateTime, nullable=True)
    nova_data = Column(DateTime, nullable=True)
    motivo = Column(Text, nullable=True)
    realizado_por = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=agora, nullable=False)

    compra_pacote = relationship("CompraPacote", back_populates="eventos")
