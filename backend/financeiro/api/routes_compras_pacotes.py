"""
Rotas FastAPI para compras de pacotes
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from financeiro.api.deps import get_tenant_id, get_usuario_id, total_paginas
from financeiro.api.schemas_compras import (
    AlertasPacotes,
    Cancelamento,
    CompraPacoteSchema,
    ExtensaoPrazo,
    ListaComprasPacotes,
    VendaPacoteCreate,
    VendaPacoteResposta,
)
from financeiro.core.config import settings
from financeiro.db import get_db
from financeiro.services import compras_pacotes as compras_service
from financeiro.services import relatorios

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/compras-pacotes", tags=["compras-pacotes"])


@router.post("", response_model=VendaPacoteResposta, status_code=201)
def vender_pacote(
    venda: VendaPacoteCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    """
    Vende um pacote a um cliente.

    Cria a compra e a receita correspondente; `valorPago` > 0 registra
    o primeiro pagamento.
    """
    compra, transacao = compras_service.vender_pacote(
        db,
        tenant_id,
        cliente_id=venda.cliente_id,
        pacote_id=venda.pacote_id,
        dias_validade=venda.dias_validade,
        parcelado=venda.parcelado,
        numero_parcelas=venda.numero_parcelas,
        valor_pago=venda.valor_pago,
        forma_pagamento=venda.forma_pagamento,
        dados_pagamento=venda.dados_metodo(),
    )
    return VendaPacoteResposta(
        message="Pacote vendido com sucesso",
        compra_pacote=compra,
        transacao=transacao,
    )


@router.get("", response_model=ListaComprasPacotes)
def listar_compras(
    status: Optional[str] = None,
    cliente: Optional[int] = None,
    pacote: Optional[int] = None,
    expirando: bool = False,
    dias: Optional[int] = None,
    poucas_sessoes: bool = Query(False, alias="poucasSessoes"),
    limite_sessoes: Optional[int] = Query(None, alias="limiteSessoes"),
    limit: int = Query(settings.limite_padrao, ge=1, le=500),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    """Lista compras com filtros e paginação"""
    compras, total = compras_service.listar_compras(
        db,
        tenant_id,
        status=status,
        cliente_id=cliente,
        pacote_id=pacote,
        expirando=expirando,
        dias=dias,
        poucas_sessoes=poucas_sessoes,
        limite_sessoes=limite_sessoes,
        limit=limit,
        page=page,
    )
    return ListaComprasPacotes(
        compras=compras,
        total=total,
        page=page,
        total_pages=total_paginas(total, limit),
    )


@router.get("/alertas", response_model=AlertasPacotes)
def alertas(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    """Pacotes expirando em breve e pacotes com poucas sessões"""
    return AlertasPacotes(**compras_service.alertas(db, tenant_id))


@router.get("/estatisticas")
def estatisticas(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return relatorios.estatisticas_compras(db, tenant_id)


@router.get("/expirando", response_model=List[CompraPacoteSchema])
def expirando(
    dias: int = Query(settings.dias_alerta_expiracao, ge=1),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return compras_service.compras_expirando(db, tenant_id, dias)


@router.get("/cliente/{cliente_id}", response_model=List[CompraPacoteSchema])
def compras_do_cliente(
    cliente_id: int,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return compras_service.compras_do_cliente(db, tenant_id, cliente_id, status)


@router.get("/{compra_id}", response_model=CompraPacoteSchema)
def obter_compra(
    compra_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return compras_service.obter_compra(db, tenant_id, compra_id)


@router.put("/{compra_id}/estender-prazo", response_model=CompraPacoteSchema)
def estender_prazo(
    compra_id: int,
    extensao: ExtensaoPrazo,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    usuario_id: Optional[str] = Depends(get_usuario_id),
):
    """Estende o prazo de validade; um pacote expirado com sessões volta a Ativo"""
    return compras_service.estender_prazo(
        db, tenant_id, compra_id, extensao.dias, extensao.motivo, usuario_id
    )


@router.put("/{compra_id}/cancelar", response_model=CompraPacoteSchema)
def cancelar_compra(
    compra_id: int,
    cancelamento: Cancelamento,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    usuario_id: Optional[str] = Depends(get_usuario_id),
):
    return compras_service.cancelar_compra(
        db, tenant_id, compra_id, cancelamento.motivo or "", usuario_id
    )


@router.delete("/{compra_id}")
def deletar_compra(
    compra_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    """Exclusão definitiva da compra e do seu histórico"""
    compras_service.deletar_compra(db, tenant_id, compra_id)
    return {"message": "Compra de pacote deletada com sucesso", "id": compra_id}
