"""
Modelo SQLAlchemy de transação financeira (lançamento a receber/pagar)
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Float, ForeignKey, Text, Index
)
from sqlalchemy.orm import relationship

from financeiro.core.datas import agora
from financeiro.core.enums import (
    CATEGORIAS_POR_TIPO,
    CategoriaTransacao,
    StatusPagamento,
    TipoTransacao,
)
from financeiro.core.exceptions import ErroEstado, ErroValidacao
from financeiro.models.base import Base, arredondar


class Transacao(Base):
    """Lançamento financeiro: uma receita ou despesa"""

    __tablename__ = "transacoes"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), nullable=False, index=True)

    tipo = Column(String(20), nullable=False)  # Receita | Despesa
    categoria = Column(String(50), nullable=False)

    # Relacionamentos (opcionais)
    agendamento_id = Column(Integer, ForeignKey("agendamentos.id"), nullable=True)
    cliente_id = Column(Integer, ForeignKey("clientes.id"), nullable=True)
    compra_pacote_id = Column(
        Integer, ForeignKey("compras_pacotes.id", ondelete="SET NULL"), nullable=True
    )
    profissional_id = Column(String(64), nullable=True)

    # Movimentos do caixa (abertura, sangria, suprimento, fechamento)
    sessao_caixa_id = Column(Integer, ForeignKey("sessoes_caixa.id"), nullable=True)
    movimento_caixa = Column(String(20), nullable=True)

    # Valores
    valor = Column(Float, nullable=False)
    desconto = Column(Float, default=0.0, nullable=False)
    valor_final = Column(Float, nullable=False, default=0.0)

    # Pagamento
    status_pagamento = Column(String(20), default=StatusPagamento.PENDENTE.value, nullable=False)
    forma_pagamento = Column(String(40), nullable=True)
    data_pagamento = Column(DateTime, nullable=True)

    # Parcelamento
    parcelado = Column(Boolean, default=False, nullable=False)
    numero_parcelas = Column(Integer, default=1, nullable=False)
    parcela_atual = Column(Integer, default=1, nullable=False)

    # Detalhes
    descricao = Column(String(255), nullable=False)
    observacoes = Column(Text, default="", nullable=False)

    # Comissão (receitas de serviços)
    comissao_profissional_id = Column(String(64), nullable=True)
    comissao_percentual = Column(Float, default=0.0, nullable=False)
    comissao_valor = Column(Float, default=0.0, nullable=False)
    comissao_pago = Column(Boolean, default=False, nullable=False)
    comissao_data_pagamento = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=agora, nullable=False)
    updated_at = Column(DateTime, default=agora, onupdate=agora, nullable=False)

    pagamentos = relationship(
        "Pagamento",
        back_populates="transacao",
        cascade="all, delete-orphan",
        order_by="Pagamento.data_pagamento.desc()",
    )
    cliente = relationship("Cliente")
    compra_pacote = relationship("CompraPacote")
    sessao_caixa = relationship("SessaoCaixa", back_populates="movimentos")

    __table_args__ = (
        Index("ix_transacoes_tenant_tipo_criado", "tenant_id", "tipo", "created_at"),
        Index("ix_transacoes_tenant_status", "tenant_id", "status_pagamento"),
    )

    # ------------------------------------------------------------------
    # Campos derivados
    # ------------------------------------------------------------------

    @property
    def total_pagamentos(self) -> float:
        """Soma dos pagamentos registrados"""
        return arredondar(sum(p.valor for p in self.pagamentos))

    @property
    def valor_pago(self) -> float:
        """
        Valor quitado da transação.

        Movimentos de caixa nascem pagos e sem pagamentos registrados; para
        eles o valor pago é o próprio valor final.
        """
        if not self.pagamentos and self.status_pagamento == StatusPagamento.PAGO.value:
            return self.valor_final or 0.0
        return self.total_pagamentos

    @property
    def valor_pendente(self) -> float:
        return arredondar((self.valor_final or 0) - self.valor_pago)

    @property
    def valor_parcela(self) -> float:
        if self.parcelado and self.numero_parcelas:
            return (self.valor_final or 0) / self.numero_parcelas
        return self.valor_final or 0

    @property
    def comissao(self) -> dict:
        return {
            "profissional_id": self.comissao_profissional_id,
            "percentual": self.comissao_percentual or 0,
            "valor": self.comissao_valor or 0,
            "pago": bool(self.comissao_pago),
            "data_pagamento": self.comissao_data_pagamento,
        }

    def recalcular(self):
        """Revalida a transação; chamado antes de cada flush"""
        if self.valor is None or self.valor < 0:
            raise ErroValidacao("O valor não pode ser negativo")
        if (self.desconto or 0) < 0:
            raise ErroValidacao("O desconto não pode ser negativo")

        self.valor_final = arredondar(self.valor - (self.desconto or 0))
        if self.valor_final < 0:
            raise ErroValidacao("O desconto não pode ser maior que o valor")

        try:
            tipo = TipoTransacao(self.tipo)
            categoria = CategoriaTransacao(self.categoria)
        except ValueError:
            raise ErroValidacao(f"Tipo/categoria inválidos: {self.tipo}/{self.categoria}")
        if categoria not in CATEGORIAS_POR_TIPO[tipo]:
            raise ErroValidacao(f"Categoria '{categoria.value}' não é válida para {tipo.value}")

        if not 1 <= (self.numero_parcelas or 1) <= 12:
            raise ErroValidacao("Número de parcelas deve estar entre 1 e 12")

        percentual = self.comissao_percentual or 0
        if not 0 <= percentual <= 100:
            raise ErroValidacao("Percentual de comissão deve estar entre 0 e 100")
        if percentual > 0 and self.valor_final > 0:
            self.comissao_valor = arredondar(self.valor_final * percentual / 100)
        elif percentual == 0:
            self.comissao_valor = 0.0

    # ------------------------------------------------------------------
    # Regras de pagamento
    # ------------------------------------------------------------------

    def registrar_pagamento(
        self,
        valor_pago: float,
        forma_pagamento: str,
        data_pagamento: Optional[datetime] = None,
    ) -> "Transacao":
        """Atualiza o status a partir do total pago.

        `valor_pago` é o total acumulado dos pagamentos; a transação não
        guarda saldo próprio.
        """
        if valor_pago is None or valor_pago <= 0:
            raise ErroValidacao("Valor do pagamento deve ser maior que zero")

        if self.status_pagamento == StatusPagamento.PAGO.value:
            raise ErroEstado("Transação já está paga")

        if self.status_pagamento in (StatusPagamento.CANCELADO.value, StatusPagamento.ESTORNADO.value):
            raise ErroEstado("Não é possível registrar pagamento em transação cancelada ou estornada")

        if arredondar(valor_pago) >= arredondar(self.valor_final):
            self.status_pagamento = StatusPagamento.PAGO.value
            self.data_pagamento = data_pagamento or agora()
        else:
            self.status_pagamento = StatusPagamento.PARCIAL.value

        self.forma_pagamento = forma_pagamento
        self._atualizar_parcela_atual(valor_pago)
        return self

    def reverter_pagamento(self) -> "Transacao":
        """Recalcula o status depois de um pagamento estornado"""
        if self.status_pagamento not in (StatusPagamento.PAGO.value, StatusPagamento.PARCIAL.value):
            return self

        pago = self.total_pagamentos
        if pago <= 0:
            self.status_pagamento = StatusPagamento.PENDENTE.value
            self.data_pagamento = None
        elif pago < arredondar(self.valor_final):
            self.status_pagamento = StatusPagamento.PARCIAL.value
            self.data_pagamento = None

        self._atualizar_parcela_atual(pago)
        return self

    def _atualizar_parcela_atual(self, pago: float):
        if self.parcelado and self.valor_parcela > 0:
            pagas = int(pago // self.valor_parcela)
            self.parcela_atual = min(pagas + 1, self.numero_parcelas)

    def cancelar(self, motivo: str = "") -> "Transacao":
        """Cancela (nunca paga) ou estorna (já paga)"""
        if self.status_pagamento == StatusPagamento.PAGO.value:
            self.status_pagamento = StatusPagamento.ESTORNADO.value
        else:
            self.status_pagamento = StatusPagamento.CANCELADO.value

        if motivo:
            self.observacoes = f"{self.observacoes or ''}\n[Cancelado/Estornado] {motivo}".strip()

        return self
