"""
Serviço de pagamentos: registro, estorno e consulta
"""

import logging
from datetime import date, datetime
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from financeiro.core.config import settings
from financeiro.core.datas import agora, limites_do_periodo, para_utc
from financeiro.core.exceptions import ErroValidacao, NaoEncontrado
from financeiro.models import Pagamento, Transacao
from financeiro.models.base import arredondar
from financeiro.models.pagamento import CAMPO_DADOS

logger = logging.getLogger(__name__)

CAMPOS_DADOS = sorted(set(CAMPO_DADOS.values()))


def obter_pagamento(db: Session, tenant_id: str, pagamento_id: int) -> Pagamento:
    pagamento = (
        db.query(Pagamento)
        .filter(Pagamento.id == pagamento_id, Pagamento.tenant_id == tenant_id)
        .first()
    )
    if not pagamento:
        raise NaoEncontrado("Pagamento não encontrado")
    return pagamento


def registrar_pagamento(
    db: Session,
    transacao: Transacao,
    valor: float,
    forma_pagamento: str,
    data_pagamento: Optional[datetime] = None,
    dados: Optional[dict] = None,
    observacoes: Optional[str] = None,
) -> Pagamento:
    """
    Registra um pagamento contra uma transação.

    O pagamento é validado (dados do método) antes de mexer na transação;
    a transação recebe o total acumulado e, se for venda de pacote, a
    compra recebe o valor deste pagamento.

    Args:
        dados: dados do método por campo do modelo
            (ex: {"dados_mbway": {"telefone": "912345678"}})
    """
    data_pagamento = para_utc(data_pagamento) if data_pagamento else agora()

    pagamento = Pagamento(
        tenant_id=transacao.tenant_id,
        valor=valor,
        forma_pagamento=forma_pagamento,
        data_pagamento=data_pagamento,
        observacoes=observacoes or "",
        **{campo: valor_campo for campo, valor_campo in (dados or {}).items() if campo in CAMPOS_DADOS},
    )
    pagamento.recalcular()

    total_pago = arredondar(transacao.total_pagamentos + pagamento.valor)
    transacao.registrar_pagamento(total_pago, pagamento.forma_pagamento, data_pagamento)
    transacao.pagamentos.append(pagamento)

    if transacao.compra_pacote is not None:
        transacao.compra_pacote.registrar_pagamento(pagamento.valor)

    db.flush()
    logger.info(
        f"Pagamento {pagamento.id} registrado: transacao={transacao.id}, "
        f"valor={pagamento.valor}, forma={pagamento.forma_pagamento}, "
        f"status={transacao.status_pagamento}"
    )
    return pagamento


def estornar_pagamento(db: Session, tenant_id: str, pagamento_id: int) -> Transacao:
    """Remove o pagamento e desfaz seus efeitos na transação e na compra"""
    pagamento = obter_pagamento(db, tenant_id, pagamento_id)
    transacao = pagamento.transacao

    transacao.pagamentos.remove(pagamento)
    transacao.reverter_pagamento()

    if transacao.compra_pacote is not None:
        transacao.compra_pacote.estornar_pagamento(pagamento.valor)

    db.flush()
    logger.info(
        f"Pagamento {pagamento_id} estornado: transacao={transacao.id}, "
        f"valor={pagamento.valor}, status={transacao.status_pagamento}"
    )
    return transacao


def atualizar_pagamento(db: Session, tenant_id: str, pagamento_id: int, dados: dict) -> Pagamento:
    """
    Atualiza dados descritivos do pagamento (data, observações, dados do
    método). Valor e forma não mudam: para isso, estorne e registre outro.
    """
    pagamento = obter_pagamento(db, tenant_id, pagamento_id)

    if "valor" in dados or "forma_pagamento" in dados:
        raise ErroValidacao(
            "Valor e forma de pagamento não podem ser alterados; estorne e registre um novo pagamento"
        )

    if dados.get("data_pagamento") is not None:
        pagamento.data_pagamento = para_utc(dados["data_pagamento"])
    if "observacoes" in dados:
        pagamento.observacoes = dados["observacoes"] or ""
    # Só os dados da própria forma; chaves novas somam-se às já gravadas
    campo = CAMPO_DADOS.get(pagamento.forma_pagamento)
    if campo and dados.get(campo):
        setattr(pagamento, campo, {**(getattr(pagamento, campo) or {}), **dados[campo]})

    db.flush()
    return pagamento


def listar_pagamentos(
    db: Session,
    tenant_id: str,
    forma_pagamento: Optional[str] = None,
    transacao_id: Optional[int] = None,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    limit: Optional[int] = None,
    page: int = 1,
) -> Tuple[List[Pagamento], int, float]:
    """
    Returns:
        (pagamentos da página, total de registros, soma dos valores filtrados)
    """
    query = db.query(Pagamento).filter(Pagamento.tenant_id == tenant_id)

    if forma_pagamento:
        query = query.filter(Pagamento.forma_pagamento == forma_pagamento)
    if transacao_id:
        query = query.filter(Pagamento.transacao_id == transacao_id)
    if data_inicio or data_fim:
        inicio, fim = limites_do_periodo(data_inicio or data_fim, data_fim or data_inicio)
        query = query.filter(Pagamento.data_pagamento >= inicio, Pagamento.data_pagamento < fim)

    total = query.count()
    valor_total = query.with_entities(func.coalesce(func.sum(Pagamento.valor), 0.0)).scalar()

    limit = limit or settings.limite_padrao
    pagamentos = (
        query.order_by(Pagamento.data_pagamento.desc())
        .offset((max(page, 1) - 1) * limit)
        .limit(limit)
        .all()
    )
    return pagamentos, total, arredondar(valor_total)
