"""
Rotas FastAPI para clientes, pacotes e agendamentos
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from financeiro.api.deps import get_tenant_id
from financeiro.api.schemas_cadastros import (
    AgendamentoCreate,
    AgendamentoSchema,
    ClienteCreate,
    ClienteSchema,
    PacoteCreate,
    PacoteSchema,
    PagamentoAgendamento,
    StatusAgendamentoUpdate,
)
from financeiro.api.schemas_pagamentos import PagamentoSchema
from financeiro.api.schemas_transacoes import TransacaoSchema
from financeiro.db import get_db
from financeiro.services import agendamentos as agendamentos_service
from financeiro.services import cadastros as cadastros_service

logger = logging.getLogger(__name__)

clientes_router = APIRouter(prefix="/clientes", tags=["clientes"])
pacotes_router = APIRouter(prefix="/pacotes", tags=["pacotes"])
agendamentos_router = APIRouter(prefix="/agendamentos", tags=["agendamentos"])


@clientes_router.post("", response_model=ClienteSchema, status_code=201)
def criar_cliente(
    cliente: ClienteCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return cadastros_service.criar_cliente(db, tenant_id, cliente.model_dump())


@clientes_router.get("", response_model=List[ClienteSchema])
def listar_clientes(
    nome: Optional[str] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return cadastros_service.listar_clientes(db, tenant_id, nome)


@pacotes_router.post("", response_model=PacoteSchema, status_code=201)
def criar_pacote(
    pacote: PacoteCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return cadastros_service.criar_pacote(db, tenant_id, pacote.model_dump())


@pacotes_router.get("", response_model=List[PacoteSchema])
def listar_pacotes(
    ativo: Optional[bool] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return cadastros_service.listar_pacotes(db, tenant_id, ativo)


@agendamentos_router.post("", response_model=AgendamentoSchema, status_code=201)
def criar_agendamento(
    agendamento: AgendamentoCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return agendamentos_service.criar_agendamento(db, tenant_id, agendamento.model_dump())


@agendamentos_router.get("/{agendamento_id}", response_model=AgendamentoSchema)
def obter_agendamento(
    agendamento_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return agendamentos_service.obter_agendamento(db, tenant_id, agendamento_id)


@agendamentos_router.patch("/{agendamento_id}/status", response_model=AgendamentoSchema)
def atualizar_status(
    agendamento_id: int,
    dados: StatusAgendamentoUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    """
    Altera o status. "Realizado" consome a sessão do pacote vinculado ou
    deixa o serviço avulso pendente de pagamento.
    """
    return agendamentos_service.atualizar_status(db, tenant_id, agendamento_id, dados.status)


@agendamentos_router.post("/{agendamento_id}/pagamento", status_code=201)
def registrar_pagamento(
    agendamento_id: int,
    dados: PagamentoAgendamento,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    """Registra o pagamento de um serviço avulso (cria a receita se preciso)"""
    pagamento, transacao, agendamento = agendamentos_service.registrar_pagamento(
        db,
        tenant_id,
        agendamento_id,
        forma_pagamento=dados.forma_pagamento,
        valor=dados.valor,
        data_pagamento=dados.data_pagamento,
        dados=dados.dados_metodo(),
        observacoes=dados.observacoes,
    )
    return {
        "message": "Pagamento registrado com sucesso",
        "pagamento": PagamentoSchema.model_validate(pagamento),
        "transacao": TransacaoSchema.model_validate(transacao),
        "agendamento": AgendamentoSchema.model_validate(agendamento),
    }
