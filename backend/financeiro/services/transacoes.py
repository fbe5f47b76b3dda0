"""
Serviço de transações: CRUD do livro financeiro e comissões
"""

import logging
from datetime import date, datetime
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from financeiro.core.config import settings
from financeiro.core.datas import agora, limites_do_periodo, para_utc
from financeiro.core.enums import FORMAS_TRANSACAO, StatusPagamento, TipoTransacao
from financeiro.core.exceptions import ErroEstado, ErroValidacao, NaoEncontrado
from financeiro.models import Agendamento, Cliente, CompraPacote, Transacao
from financeiro.models.base import arredondar

logger = logging.getLogger(__name__)

STATUS_ENCERRADOS = (StatusPagamento.CANCELADO.value, StatusPagamento.ESTORNADO.value)

# Campos que o PUT pode alterar
CAMPOS_EDITAVEIS = (
    "tipo",
    "categoria",
    "valor",
    "desconto",
    "descricao",
    "observacoes",
    "profissional_id",
    "forma_pagamento",
    "parcelado",
    "numero_parcelas",
    "comissao_profissional_id",
    "comissao_percentual",
)


def obter_transacao(db: Session, tenant_id: str, transacao_id: int) -> Transacao:
    transacao = (
        db.query(Transacao)
        .filter(Transacao.id == transacao_id, Transacao.tenant_id == tenant_id)
        .first()
    )
    if not transacao:
        raise NaoEncontrado("Transação não encontrada")
    return transacao


def _validar_vinculos(db: Session, tenant_id: str, dados: dict):
    vinculos = (
        ("cliente_id", Cliente, "Cliente não encontrado"),
        ("compra_pacote_id", CompraPacote, "Compra de pacote não encontrada"),
        ("agendamento_id", Agendamento, "Agendamento não encontrado"),
    )
    for campo, modelo, mensagem in vinculos:
        if dados.get(campo) is None:
            continue
        existe = (
            db.query(modelo.id)
            .filter(modelo.id == dados[campo], modelo.tenant_id == tenant_id)
            .first()
        )
        if not existe:
            raise NaoEncontrado(mensagem)


def _validar_forma(forma: Optional[str]):
    if forma is not None and forma not in FORMAS_TRANSACAO:
        raise ErroValidacao(f"Forma de pagamento inválida: {forma}")


def criar_transacao(db: Session, tenant_id: str, dados: dict) -> Transacao:
    """
    Cria uma transação pendente.

    Args:
        dados: campos do modelo (snake_case), já validados pelo schema
    """
    _validar_vinculos(db, tenant_id, dados)
    _validar_forma(dados.get("forma_pagamento"))

    transacao = Transacao(
        tenant_id=tenant_id,
        tipo=dados["tipo"],
        categoria=dados["categoria"],
        agendamento_id=dados.get("agendamento_id"),
        cliente_id=dados.get("cliente_id"),
        compra_pacote_id=dados.get("compra_pacote_id"),
        profissional_id=dados.get("profissional_id"),
        valor=dados["valor"],
        desconto=dados.get("desconto") or 0.0,
        forma_pagamento=dados.get("forma_pagamento"),
        descricao=dados["descricao"],
        observacoes=dados.get("observacoes") or "",
        parcelado=bool(dados.get("parcelado")),
        numero_parcelas=dados.get("numero_parcelas") or 1,
        comissao_profissional_id=dados.get("comissao_profissional_id"),
        comissao_percentual=dados.get("comissao_percentual") or 0.0,
        status_pagamento=StatusPagamento.PENDENTE.value,
    )
    db.add(transacao)
    db.flush()

    logger.info(
        f"Transação {transacao.id} criada: {transacao.tipo}/{transacao.categoria} "
        f"valor_final={transacao.valor_final}"
    )
    return transacao


def atualizar_transacao(db: Session, tenant_id: str, transacao_id: int, dados: dict) -> Transacao:
    transacao = obter_transacao(db, tenant_id, transacao_id)

    if transacao.status_pagamento in STATUS_ENCERRADOS:
        raise ErroEstado("Transação cancelada ou estornada não pode ser alterada")

    alteracoes = {
        campo: valor for campo, valor in dados.items()
        if campo in CAMPOS_EDITAVEIS and valor is not None
    }

    muda_valor = any(
        campo in alteracoes and alteracoes[campo] != getattr(transacao, campo)
        for campo in ("valor", "desconto")
    )
    if muda_valor and transacao.status_pagamento == StatusPagamento.PAGO.value:
        raise ErroEstado("Não é possível alterar o valor de uma transação já paga")

    muda_classificacao = any(
        campo in alteracoes and alteracoes[campo] != getattr(transacao, campo)
        for campo in ("tipo", "categoria")
    )
    if muda_classificacao and transacao.pagamentos:
        raise ErroEstado("Não é possível alterar tipo ou categoria de uma transação com pagamentos")

    _validar_forma(alteracoes.get("forma_pagamento"))

    for campo, valor in alteracoes.items():
        setattr(transacao, campo, valor)

    db.flush()
    return transacao


def cancelar_transacao(
    db: Session, tenant_id: str, transacao_id: int, motivo: str = ""
) -> Transacao:
    transacao = obter_transacao(db, tenant_id, transacao_id)

    if transacao.status_pagamento in STATUS_ENCERRADOS:
        raise ErroEstado("Transação já está cancelada ou estornada")

    transacao.cancelar(motivo)
    db.flush()

    logger.info(f"Transação {transacao.id} agora {transacao.status_pagamento}")
    return transacao


def deletar_transacao(db: Session, tenant_id: str, transacao_id: int) -> None:
    """Exclusão definitiva; só para lançamentos sem agendamento e sem pagamentos"""
    transacao = obter_transacao(db, tenant_id, transacao_id)

    if transacao.agendamento_id is not None:
        raise ErroEstado("Não é possível deletar transação vinculada a um agendamento")
    if transacao.pagamentos:
        raise ErroEstado(
            "Não é possível deletar transação com pagamentos registrados; cancele-a ou estorne os pagamentos"
        )

    db.delete(transacao)
    db.flush()
    logger.info(f"Transação {transacao_id} deletada")


def listar_transacoes(
    db: Session,
    tenant_id: str,
    tipo: Optional[str] = None,
    categoria: Optional[str] = None,
    status_pagamento: Optional[str] = None,
    cliente_id: Optional[int] = None,
    profissional_id: Optional[str] = None,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    limit: Optional[int] = None,
    page: int = 1,
) -> Tuple[List[Transacao], int, dict]:
    """
    Returns:
        (transações da página, total de registros, totais de receitas/despesas/saldo)
    """
    query = db.query(Transacao).filter(Transacao.tenant_id == tenant_id)

    if tipo:
        query = query.filter(Transacao.tipo == tipo)
    if categoria:
        query = query.filter(Transacao.categoria == categoria)
    if status_pagamento:
        query = query.filter(Transacao.status_pagamento == status_pagamento)
    if cliente_id:
        query = query.filter(Transacao.cliente_id == cliente_id)
    if profissional_id:
        query = query.filter(Transacao.profissional_id == profissional_id)
    if data_inicio or data_fim:
        inicio, fim = limites_do_periodo(data_inicio or data_fim, data_fim or data_inicio)
        query = query.filter(Transacao.created_at >= inicio, Transacao.created_at < fim)

    total = query.count()

    somas = dict(
        query.filter(Transacao.status_pagamento.notin_(STATUS_ENCERRADOS))
        .with_entities(Transacao.tipo, func.sum(Transacao.valor_final))
        .group_by(Transacao.tipo)
        .all()
    )
    receitas = arredondar(somas.get(TipoTransacao.RECEITA.value))
    despesas = arredondar(somas.get(TipoTransacao.DESPESA.value))

    limit = limit or settings.limite_padrao
    transacoes = (
        query.order_by(Transacao.created_at.desc())
        .offset((max(page, 1) - 1) * limit)
        .limit(limit)
        .all()
    )
    totais = {"receitas": receitas, "despesas": despesas, "saldo": arredondar(receitas - despesas)}
    return transacoes, total, totais


def transacoes_pendentes(
    db: Session, tenant_id: str, tipo: Optional[str] = None
) -> List[Transacao]:
    """Transações a receber/pagar (Pendente ou Parcial), mais antigas primeiro"""
    query = db.query(Transacao).filter(
        Transacao.tenant_id == tenant_id,
        Transacao.status_pagamento.in_(
            [StatusPagamento.PENDENTE.value, StatusPagamento.PARCIAL.value]
        ),
    )
    if tipo:
        query = query.filter(Transacao.tipo == tipo)
    return query.order_by(Transacao.created_at).all()


def comissoes_pendentes(
    db: Session, tenant_id: str, profissional_id: Optional[str] = None
) -> dict:
    """Comissões de receitas já pagas ainda não repassadas, agrupadas por profissional"""
    query = db.query(Transacao).filter(
        Transacao.tenant_id == tenant_id,
        Transacao.tipo == TipoTransacao.RECEITA.value,
        Transacao.status_pagamento == StatusPagamento.PAGO.value,
        Transacao.comissao_valor > 0,
        Transacao.comissao_pago.is_(False),
    )
    if profissional_id:
        query = query.filter(Transacao.comissao_profissional_id == profissional_id)

    por_profissional = {}
    for transacao in query.order_by(Transacao.data_pagamento).all():
        grupo = por_profissional.setdefault(
            transacao.comissao_profissional_id,
            {"profissionalId": transacao.comissao_profissional_id, "totalComissao": 0.0, "transacoes": []},
        )
        grupo["totalComissao"] = arredondar(grupo["totalComissao"] + transacao.comissao_valor)
        grupo["transacoes"].append({
            "transacaoId": transacao.id,
            "descricao": transacao.descricao,
            "valorServico": transacao.valor_final,
            "percentual": transacao.comissao_percentual,
            "valorComissao": transacao.comissao_valor,
            "data": transacao.data_pagamento,
        })

    comissoes = list(por_profissional.values())
    return {
        "comissoes": comissoes,
        "totalGeral": arredondar(sum(c["totalComissao"] for c in comissoes)),
    }


def pagar_comissao(
    db: Session,
    tenant_id: str,
    transacao_id: int,
    data_pagamento: Optional[datetime] = None,
) -> Transacao:
    transacao = obter_transacao(db, tenant_id, transacao_id)

    if not transacao.comissao_valor:
        raise ErroValidacao("Transação não possui comissão")
    if transacao.comissao_pago:
        raise ErroEstado("Comissão já foi paga")

    transacao.comissao_pago = True
    transacao.comissao_data_pagamento = para_utc(data_pagamento) if data_pagamento else agora()
    db.flush()

    logger.info(
        f"Comissão da transação {transacao.id} paga: "
        f"profissional={transacao.comissao_profissional_id}, valor={transacao.comissao_valor}"
    )
    return transacao
