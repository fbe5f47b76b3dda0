"""
Schemas Pydantic para API do caixa
"""

from datetime import date, datetime
from typing import Optional

from financeiro.api.schemas_base import SchemaBase


class AberturaCaixa(SchemaBase):
    valor_inicial: float = 0.0


class AjusteCaixa(SchemaBase):
    """Sangria ou suprimento"""

    valor: float
    motivo: Optional[str] = None
    forma_pagamento: Optional[str] = None


class FechamentoCaixa(SchemaBase):
    saldo_contado: float
    observacoes: Optional[str] = None


class SessaoCaixaSchema(SchemaBase):
    id: int
    data: date
    aberto_em: Optional[datetime] = None
    aberto_por: Optional[str] = None
    valor_abertura: float
    fechado_em: Optional[datetime] = None
    fechado_por: Optional[str] = None
    saldo_esperado: Optional[float] = None
    saldo_contado: Optional[float] = None
    diferenca: Optional[float] = None
    observacoes: Optional[str] = None
