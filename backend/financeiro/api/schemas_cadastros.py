"""
Schemas Pydantic para clientes, pacotes e agendamentos
"""

from datetime import datetime
from typing import Optional

from financeiro.api.schemas_base import SchemaBase
from financeiro.api.schemas_pagamentos import DadosMetodo
from financeiro.core.enums import FormaPagamento, StatusAgendamento


class ClienteCreate(SchemaBase):
    nome: str
    telefone: Optional[str] = None
    email: Optional[str] = None


class ClienteSchema(ClienteCreate):
    id: int
    created_at: datetime


class PacoteCreate(SchemaBase):
    nome: str
    categoria: str
    sessoes: int
    valor: float
    descricao: Optional[str] = None
    ativo: bool = True


class PacoteSchema(PacoteCreate):
    id: int
    valor_por_sessao: float
    created_at: datetime


class AgendamentoCreate(SchemaBase):
    cliente_id: int
    data_hora: datetime
    pacote_id: Optional[int] = None
    compra_pacote_id: Optional[int] = None
    profissional_id: Optional[str] = None
    observacoes: Optional[str] = None
    servico_avulso_nome: Optional[str] = None
    servico_avulso_valor: Optional[float] = None


class AgendamentoSchema(SchemaBase):
    id: int
    cliente_id: int
    pacote_id: Optional[int] = None
    compra_pacote_id: Optional[int] = None
    profissional_id: Optional[str] = None
    data_hora: datetime
    status: str
    observacoes: Optional[str] = None
    servico_avulso_nome: Optional[str] = None
    servico_avulso_valor: Optional[float] = None
    valor_cobrado: Optional[float] = None
    status_pagamento: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class StatusAgendamentoUpdate(SchemaBase):
    status: StatusAgendamento


class PagamentoAgendamento(DadosMetodo):
    """Cobrança de serviço avulso; sem valor, cobra o pendente"""

    forma_pagamento: FormaPagamento
    valor: Optional[float] = None
    data_pagamento: Optional[datetime] = None
    observacoes: Optional[str] = None
