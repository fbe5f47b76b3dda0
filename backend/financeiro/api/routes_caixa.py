"""
Rotas FastAPI para o caixa diário
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from financeiro.api.deps import get_tenant_id, get_usuario_id
from financeiro.api.schemas_caixa import (
    AberturaCaixa,
    AjusteCaixa,
    FechamentoCaixa,
    SessaoCaixaSchema,
)
from financeiro.api.schemas_transacoes import TransacaoSchema
from financeiro.core.datas import formatar_data, formatar_hora
from financeiro.db import get_db
from financeiro.services import caixa as caixa_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/caixa", tags=["caixa"])


def _ajuste(transacao, motivo: str) -> dict:
    return {
        "id": transacao.id,
        "valor": transacao.valor_final,
        "motivo": motivo,
        "formaPagamento": transacao.forma_pagamento,
        "horario": formatar_hora(transacao.created_at),
    }


@router.post("/abrir", status_code=201)
def abrir_caixa(
    abertura: AberturaCaixa,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    usuario_id: Optional[str] = Depends(get_usuario_id),
):
    sessao, transacao = caixa_service.abrir_caixa(db, tenant_id, abertura.valor_inicial, usuario_id)
    return {
        "message": "Caixa aberto com sucesso",
        "caixa": SessaoCaixaSchema.model_validate(sessao),
        "abertura": TransacaoSchema.model_validate(transacao) if transacao else None,
    }


@router.get("/status")
def status_caixa(
    data: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    """Situação do caixa do dia (hoje por padrão): abertura, movimentação e totais por forma"""
    return caixa_service.status_caixa(db, tenant_id, data)


@router.post("/sangria", status_code=201)
def registrar_sangria(
    ajuste: AjusteCaixa,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    transacao = caixa_service.registrar_sangria(
        db, tenant_id, ajuste.valor, ajuste.motivo, ajuste.forma_pagamento
    )
    return {"message": "Sangria registrada com sucesso", "sangria": _ajuste(transacao, ajuste.motivo)}


@router.post("/suprimento", status_code=201)
def registrar_suprimento(
    ajuste: AjusteCaixa,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    transacao = caixa_service.registrar_suprimento(
        db, tenant_id, ajuste.valor, ajuste.motivo, ajuste.forma_pagamento
    )
    return {"message": "Suprimento registrado com sucesso", "suprimento": _ajuste(transacao, ajuste.motivo)}


@router.post("/fechar", status_code=201)
def fechar_caixa(
    fechamento: FechamentoCaixa,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    usuario_id: Optional[str] = Depends(get_usuario_id),
):
    sessao, transacao = caixa_service.fechar_caixa(
        db, tenant_id, fechamento.saldo_contado, fechamento.observacoes, usuario_id
    )
    return {
        "message": "Caixa fechado com sucesso",
        "fechamento": {
            "id": transacao.id,
            "data": formatar_data(sessao.data),
            "horario": formatar_hora(sessao.fechado_em),
            "saldoEsperado": sessao.saldo_esperado,
            "saldoContado": sessao.saldo_contado,
            "diferenca": sessao.diferenca,
            "observacoes": transacao.observacoes,
        },
    }


@router.get("/relatorio")
def relatorio_caixas(
    data_inicio: Optional[date] = Query(None, alias="dataInicio"),
    data_fim: Optional[date] = Query(None, alias="dataFim"),
    limit: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    """Histórico de fechamentos de caixa"""
    relatorio = caixa_service.relatorio_caixas(db, tenant_id, data_inicio, data_fim, limit)
    return {"relatorio": relatorio, "quantidade": len(relatorio)}
