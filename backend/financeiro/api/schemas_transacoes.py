"""
Schemas Pydantic para API de transações
"""

from datetime import datetime
from typing import List, Optional

from financeiro.api.schemas_base import SchemaBase
from financeiro.api.schemas_pagamentos import PagamentoSchema
from financeiro.core.enums import CategoriaTransacao, StatusPagamento, TipoTransacao


class ComissaoCreate(SchemaBase):
    profissional_id: Optional[str] = None
    percentual: float = 0.0


class ComissaoSchema(SchemaBase):
    profissional_id: Optional[str] = None
    percentual: float = 0.0
    valor: float = 0.0
    pago: bool = False
    data_pagamento: Optional[datetime] = None


class TransacaoCreate(SchemaBase):
    """Schema para criação de transação"""

    tipo: TipoTransacao
    categoria: CategoriaTransacao
    descricao: str
    valor: float
    desconto: float = 0.0
    agendamento_id: Optional[int] = None
    cliente_id: Optional[int] = None
    compra_pacote_id: Optional[int] = None
    profissional_id: Optional[str] = None
    forma_pagamento: Optional[str] = None
    observacoes: Optional[str] = None
    parcelado: bool = False
    numero_parcelas: int = 1
    comissao: Optional[ComissaoCreate] = None

    def dados_modelo(self) -> dict:
        """Campos planos do modelo (comissão achatada)"""
        dados = self.model_dump(exclude={"comissao"})
        if self.comissao is not None:
            dados["comissao_profissional_id"] = self.comissao.profissional_id
            dados["comissao_percentual"] = self.comissao.percentual
        return dados


class TransacaoUpdate(SchemaBase):
    """Schema para atualização parcial de transação"""

    tipo: Optional[TipoTransacao] = None
    categoria: Optional[CategoriaTransacao] = None
    descricao: Optional[str] = None
    valor: Optional[float] = None
    desconto: Optional[float] = None
    profissional_id: Optional[str] = None
    forma_pagamento: Optional[str] = None
    observacoes: Optional[str] = None
    parcelado: Optional[bool] = None
    numero_parcelas: Optional[int] = None
    comissao: Optional[ComissaoCreate] = None

    def dados_modelo(self) -> dict:
        dados = self.model_dump(exclude={"comissao"}, exclude_unset=True)
        if self.comissao is not None:
            dados["comissao_profissional_id"] = self.comissao.profissional_id
            dados["comissao_percentual"] = self.comissao.percentual
        return dados


class TransacaoSchema(SchemaBase):
    """Schema de transação para resposta da API"""

    id: int
    tipo: str
    categoria: str
    descricao: str
    agendamento_id: Optional[int] = None
    cliente_id: Optional[int] = None
    compra_pacote_id: Optional[int] = None
    profissional_id: Optional[str] = None
    sessao_caixa_id: Optional[int] = None
    movimento_caixa: Optional[str] = None
    valor: float
    desconto: float
    valor_final: float
    valor_pago: float
    valor_pendente: float
    status_pagamento: StatusPagamento
    forma_pagamento: Optional[str] = None
    data_pagamento: Optional[datetime] = None
    parcelado: bool
    numero_parcelas: int
    parcela_atual: int
    valor_parcela: float
    observacoes: Optional[str] = None
    comissao: ComissaoSchema
    created_at: datetime
    updated_at: datetime


class TransacaoDetalhe(TransacaoSchema):
    """Transação com seus pagamentos"""

    pagamentos: List[PagamentoSchema] = []


class ListaTransacoes(SchemaBase):
    transacoes: List[TransacaoSchema]
    total: int
    page: int
    total_pages: int
    totais: dict


class PagamentoRegistrado(SchemaBase):
    """Resposta do registro de pagamento: o pagamento e a transação atualizada"""

    message: str
    pagamento: PagamentoSchema
    transacao: TransacaoSchema


class PagarComissao(SchemaBase):
    data_pagamento: Optional[datetime] = None
