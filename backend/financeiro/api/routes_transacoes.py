"""
Rotas FastAPI para transações (livro financeiro)
"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from financeiro.api.deps import get_tenant_id, total_paginas
from financeiro.api.schemas_pagamentos import PagamentoCreate
from financeiro.api.schemas_transacoes import (
    ListaTransacoes,
    PagamentoRegistrado,
    PagarComissao,
    TransacaoCreate,
    TransacaoDetalhe,
    TransacaoSchema,
    TransacaoUpdate,
)
from financeiro.core.config import settings
from financeiro.db import get_db
from financeiro.services import pagamentos as pagamentos_service
from financeiro.services import relatorios
from financeiro.services import transacoes as transacoes_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transacoes", tags=["transacoes"])


@router.post("", response_model=TransacaoSchema, status_code=201)
def criar_transacao(
    transacao: TransacaoCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return transacoes_service.criar_transacao(db, tenant_id, transacao.dados_modelo())


@router.get("", response_model=ListaTransacoes)
def listar_transacoes(
    tipo: Optional[str] = None,
    categoria: Optional[str] = None,
    status_pagamento: Optional[str] = Query(None, alias="statusPagamento"),
    cliente: Optional[int] = None,
    profissional: Optional[str] = None,
    data_inicio: Optional[date] = Query(None, alias="dataInicio"),
    data_fim: Optional[date] = Query(None, alias="dataFim"),
    limit: int = Query(settings.limite_padrao, ge=1, le=500),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    """Lista transações com filtros; `totais` considera todas as páginas"""
    transacoes, total, totais = transacoes_service.listar_transacoes(
        db,
        tenant_id,
        tipo=tipo,
        categoria=categoria,
        status_pagamento=status_pagamento,
        cliente_id=cliente,
        profissional_id=profissional,
        data_inicio=data_inicio,
        data_fim=data_fim,
        limit=limit,
        page=page,
    )
    return ListaTransacoes(
        transacoes=transacoes,
        total=total,
        page=page,
        total_pages=total_paginas(total, limit),
        totais=totais,
    )


@router.get("/pendentes", response_model=List[TransacaoSchema])
def transacoes_pendentes(
    tipo: Optional[str] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return transacoes_service.transacoes_pendentes(db, tenant_id, tipo)


@router.get("/relatorio/periodo")
def relatorio_periodo(
    data_inicio: date = Query(..., alias="dataInicio"),
    data_fim: date = Query(..., alias="dataFim"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return relatorios.relatorio_periodo(db, tenant_id, data_inicio, data_fim)


@router.get("/comissoes/pendentes")
def comissoes_pendentes(
    profissional: Optional[str] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return transacoes_service.comissoes_pendentes(db, tenant_id, profissional)


@router.get("/{transacao_id}", response_model=TransacaoDetalhe)
def obter_transacao(
    transacao_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return transacoes_service.obter_transacao(db, tenant_id, transacao_id)


@router.put("/{transacao_id}", response_model=TransacaoSchema)
def atualizar_transacao(
    transacao_id: int,
    dados: TransacaoUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return transacoes_service.atualizar_transacao(db, tenant_id, transacao_id, dados.dados_modelo())


@router.delete("/{transacao_id}", response_model=TransacaoSchema)
def cancelar_transacao(
    transacao_id: int,
    motivo: Optional[str] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    """Cancela (não paga) ou estorna (paga) a transação; o registro permanece"""
    return transacoes_service.cancelar_transacao(db, tenant_id, transacao_id, motivo or "")


@router.delete("/{transacao_id}/deletar")
def deletar_transacao(
    transacao_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    transacoes_service.deletar_transacao(db, tenant_id, transacao_id)
    return {"message": "Transação deletada permanentemente", "id": transacao_id}


@router.put("/{transacao_id}/comissao/pagar", response_model=TransacaoSchema)
def pagar_comissao(
    transacao_id: int,
    dados: Optional[PagarComissao] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    data_pagamento = dados.data_pagamento if dados else None
    return transacoes_service.pagar_comissao(db, tenant_id, transacao_id, data_pagamento)


@router.post("/{transacao_id}/pagamento", response_model=PagamentoRegistrado, status_code=201)
def registrar_pagamento(
    transacao_id: int,
    dados: PagamentoCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    """
    Registra um pagamento na transação.

    A forma escolhida exige seus dados: MBWay -> dadosMBWay.telefone,
    Multibanco -> dadosMultibanco.referencia, cartões ->
    dadosCartao.ultimos4Digitos, transferência -> dadosTransferencia.iban.
    """
    transacao = transacoes_service.obter_transacao(db, tenant_id, transacao_id)
    pagamento = pagamentos_service.registrar_pagamento(
        db,
        transacao,
        valor=dados.valor,
        forma_pagamento=dados.forma_pagamento,
        data_pagamento=dados.data_pagamento,
        dados=dados.dados_metodo(),
        observacoes=dados.observacoes,
    )
    return PagamentoRegistrado(
        message="Pagamento registrado com sucesso",
        pagamento=pagamento,
        transacao=transacao,
    )
