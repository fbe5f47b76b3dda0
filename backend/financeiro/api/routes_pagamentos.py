"""
Rotas FastAPI para pagamentos
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from financeiro.api.deps import get_tenant_id, total_paginas
from financeiro.api.schemas_pagamentos import PagamentoSchema, PagamentoUpdate
from financeiro.api.schemas_transacoes import TransacaoSchema
from financeiro.core.config import settings
from financeiro.db import get_db
from financeiro.services import pagamentos as pagamentos_service
from financeiro.services import relatorios

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pagamentos", tags=["pagamentos"])


@router.get("")
def listar_pagamentos(
    forma_pagamento: Optional[str] = Query(None, alias="formaPagamento"),
    transacao: Optional[int] = None,
    data_inicio: Optional[date] = Query(None, alias="dataInicio"),
    data_fim: Optional[date] = Query(None, alias="dataFim"),
    limit: int = Query(settings.limite_padrao, ge=1, le=500),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    pagamentos, total, valor_total = pagamentos_service.listar_pagamentos(
        db,
        tenant_id,
        forma_pagamento=forma_pagamento,
        transacao_id=transacao,
        data_inicio=data_inicio,
        data_fim=data_fim,
        limit=limit,
        page=page,
    )
    return {
        "pagamentos": [PagamentoSchema.model_validate(p) for p in pagamentos],
        "total": total,
        "page": page,
        "totalPages": total_paginas(total, limit),
        "valorTotal": valor_total,
    }


@router.get("/estatisticas/formas-pagamento")
def estatisticas_formas_pagamento(
    data_inicio: Optional[date] = Query(None, alias="dataInicio"),
    data_fim: Optional[date] = Query(None, alias="dataFim"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    """Participação de cada forma de pagamento (mês corrente por padrão)"""
    return relatorios.estatisticas_formas_pagamento(db, tenant_id, data_inicio, data_fim)


@router.get("/resumo/diario")
def resumo_diario(
    data: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return relatorios.resumo_diario(db, tenant_id, data)


@router.get("/resumo/mensal")
def resumo_mensal(
    mes: Optional[int] = Query(None, ge=1, le=12),
    ano: Optional[int] = Query(None, ge=2000),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return relatorios.resumo_mensal(db, tenant_id, ano, mes)


@router.get("/{pagamento_id}", response_model=PagamentoSchema)
def obter_pagamento(
    pagamento_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return pagamentos_service.obter_pagamento(db, tenant_id, pagamento_id)


@router.put("/{pagamento_id}", response_model=PagamentoSchema)
def atualizar_pagamento(
    pagamento_id: int,
    dados: PagamentoUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    alteracoes = dados.model_dump(
        include={"valor", "forma_pagamento", "data_pagamento", "observacoes"},
        exclude_unset=True,
    )
    alteracoes.update(dados.dados_metodo())
    return pagamentos_service.atualizar_pagamento(db, tenant_id, pagamento_id, alteracoes)


@router.delete("/{pagamento_id}")
def estornar_pagamento(
    pagamento_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    """Estorna o pagamento: remove-o e recalcula transação e pacote"""
    transacao = pagamentos_service.estornar_pagamento(db, tenant_id, pagamento_id)
    return {
        "message": "Pagamento estornado com sucesso",
        "transacao": TransacaoSchema.model_validate(transacao),
    }
