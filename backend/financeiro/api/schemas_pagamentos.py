"""
Schemas Pydantic para API de pagamentos
"""

from datetime import date, datetime
from typing import Optional

from pydantic import Field

from financeiro.api.schemas_base import SchemaBase
from financeiro.core.enums import BandeiraCartao, EstadoMBWay, FormaPagamento


class DadosMBWay(SchemaBase):
    telefone: Optional[str] = None  # 9xxxxxxxx
    referencia: Optional[str] = None
    estado: Optional[EstadoMBWay] = None


class DadosMultibanco(SchemaBase):
    entidade: Optional[str] = None  # 5 dígitos
    referencia: Optional[str] = None  # 9 dígitos
    valor: Optional[float] = None
    data_limite: Optional[date] = None


class DadosCartao(SchemaBase):
    bandeira: Optional[BandeiraCartao] = None
    ultimos_4_digitos: Optional[str] = Field(None, alias="ultimos4Digitos")
    parcelas: Optional[int] = Field(None, ge=1, le=12)
    nsu: Optional[str] = None


class DadosTransferencia(SchemaBase):
    banco: Optional[str] = None
    iban: Optional[str] = None  # PT50 + 21 dígitos
    referencia: Optional[str] = None
    comprovante: Optional[str] = None


class DadosMetodo(SchemaBase):
    """Dados específicos da forma de pagamento (só o da forma escolhida é guardado)"""

    dados_mbway: Optional[DadosMBWay] = Field(None, alias="dadosMBWay")
    dados_multibanco: Optional[DadosMultibanco] = Field(None, alias="dadosMultibanco")
    dados_cartao: Optional[DadosCartao] = Field(None, alias="dadosCartao")
    dados_transferencia: Optional[DadosTransferencia] = Field(None, alias="dadosTransferencia")

    def dados_metodo(self) -> dict:
        """Dados por campo do modelo, no formato JSON gravado no banco"""
        dados = {}
        for campo in ("dados_mbway", "dados_multibanco", "dados_cartao", "dados_transferencia"):
            valor = getattr(self, campo)
            if valor is not None:
                dados[campo] = valor.model_dump(by_alias=True, exclude_none=True, mode="json")
        return dados


class PagamentoCreate(DadosMetodo):
    """Schema para registrar pagamento numa transação"""

    valor: float
    forma_pagamento: FormaPagamento
    data_pagamento: Optional[datetime] = None
    observacoes: Optional[str] = None


class PagamentoUpdate(DadosMetodo):
    """Schema para atualizar pagamento (valor e forma são recusados pelo serviço)"""

    valor: Optional[float] = None
    forma_pagamento: Optional[FormaPagamento] = None
    data_pagamento: Optional[datetime] = None
    observacoes: Optional[str] = None


class PagamentoSchema(SchemaBase):
    """Schema de pagamento para resposta da API"""

    id: int
    transacao_id: int
    valor: float
    forma_pagamento: str
    data_pagamento: datetime
    dados_mbway: Optional[dict] = Field(None, alias="dadosMBWay")
    dados_multibanco: Optional[dict] = None
    dados_cartao: Optional[dict] = None
    dados_transferencia: Optional[dict] = None
    observacoes: Optional[str] = None
    created_at: datetime
