"""
Schemas Pydantic para API de compras de pacotes
"""

from datetime import datetime
from typing import List, Optional

from financeiro.api.schemas_base import SchemaBase
from financeiro.api.schemas_pagamentos import DadosMetodo
from financeiro.api.schemas_transacoes import TransacaoSchema
from financeiro.core.enums import FormaPagamento, StatusCompraPacote


class VendaPacoteCreate(DadosMetodo):
    """Schema para venda de pacote"""

    cliente_id: int
    pacote_id: int
    dias_validade: Optional[int] = None
    parcelado: bool = False
    numero_parcelas: int = 1
    valor_pago: float = 0.0
    forma_pagamento: Optional[FormaPagamento] = None


class ExtensaoPrazo(SchemaBase):
    dias: int
    motivo: Optional[str] = None


class Cancelamento(SchemaBase):
    motivo: Optional[str] = ""


class UsoSessaoSchema(SchemaBase):
    agendamento_id: Optional[int] = None
    data_sessao: datetime
    valor_cobrado: float
    numero_da_sessao: int
    profissional_id: Optional[str] = None


class EventoCompraSchema(SchemaBase):
    tipo: str
    data_anterior: Optional[datetime] = None
    nova_data: Optional[datetime] = None
    motivo: Optional[str] = None
    realizado_por: Optional[str] = None
    created_at: datetime


class ClienteResumo(SchemaBase):
    id: int
    nome: str
    telefone: Optional[str] = None


class PacoteResumo(SchemaBase):
    id: int
    nome: str
    categoria: str
    sessoes: int
    valor: float


class CompraPacoteSchema(SchemaBase):
    """Schema de compra de pacote para resposta da API"""

    id: int
    cliente_id: int
    pacote_id: int
    cliente: Optional[ClienteResumo] = None
    pacote: Optional[PacoteResumo] = None
    sessoes_contratadas: int
    sessoes_usadas: int
    sessoes_restantes: int
    valor_total: float
    valor_pago: float
    valor_pendente: float
    parcelado: bool
    numero_parcelas: int
    parcelas_pagas: int
    valor_parcela: float
    status: StatusCompraPacote
    data_compra: datetime
    data_expiracao: Optional[datetime] = None
    dias_validade: Optional[int] = None
    historico: List[UsoSessaoSchema] = []
    extensoes: List[EventoCompraSchema] = []
    eventos: List[EventoCompraSchema] = []
    created_at: datetime
    updated_at: datetime


class VendaPacoteResposta(SchemaBase):
    message: str
    compra_pacote: CompraPacoteSchema
    transacao: TransacaoSchema


class ListaComprasPacotes(SchemaBase):
    compras: List[CompraPacoteSchema]
    total: int
    page: int
    total_pages: int


class AlertasPacotes(SchemaBase):
    expirando: List[CompraPacoteSchema]
    poucas_sessoes: List[CompraPacoteSchema]
    total_alertas: int
