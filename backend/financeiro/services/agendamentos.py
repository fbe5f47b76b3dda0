"""
Ponte entre agendamentos e o financeiro

Quando um atendimento passa a "Realizado": com pacote, consome uma sessão;
com serviço avulso, fica pendente de pagamento até o registro da cobrança.
"""

import logging
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from financeiro.core.datas import para_utc
from financeiro.core.enums import (
    CategoriaTransacao,
    StatusAgendamento,
    StatusPagamento,
    TipoTransacao,
)
from financeiro.core.exceptions import ErroEstado, ErroValidacao, NaoEncontrado
from financeiro.models import Agendamento, Cliente, Pacote, Pagamento, Transacao
from financeiro.models.base import arredondar
from financeiro.services import compras_pacotes as compras_service
from financeiro.services import pagamentos as pagamentos_service
from financeiro.services.transacoes import STATUS_ENCERRADOS

logger = logging.getLogger(__name__)


def obter_agendamento(db: Session, tenant_id: str, agendamento_id: int) -> Agendamento:
    agendamento = (
        db.query(Agendamento)
        .filter(Agendamento.id == agendamento_id, Agendamento.tenant_id == tenant_id)
        .first()
    )
    if not agendamento:
        raise NaoEncontrado("Agendamento não encontrado")
    return agendamento


def criar_agendamento(db: Session, tenant_id: str, dados: dict) -> Agendamento:
    cliente = (
        db.query(Cliente)
        .filter(Cliente.id == dados["cliente_id"], Cliente.tenant_id == tenant_id)
        .first()
    )
    if not cliente:
        raise NaoEncontrado("Cliente não encontrado")

    if dados.get("pacote_id") is not None:
        pacote = (
            db.query(Pacote)
            .filter(Pacote.id == dados["pacote_id"], Pacote.tenant_id == tenant_id)
            .first()
        )
        if not pacote:
            raise NaoEncontrado("Pacote não encontrado")

    if dados.get("compra_pacote_id") is not None:
        compra = compras_service.obter_compra(db, tenant_id, dados["compra_pacote_id"])
        if compra.cliente_id != cliente.id:
            raise ErroValidacao("Compra de pacote não pertence a este cliente")
        if dados.get("pacote_id") is None:
            dados["pacote_id"] = compra.pacote_id

    if dados.get("servico_avulso_valor") is not None and dados["servico_avulso_valor"] < 0:
        raise ErroValidacao("Valor do serviço avulso não pode ser negativo")

    agendamento = Agendamento(
        tenant_id=tenant_id,
        cliente_id=cliente.id,
        pacote_id=dados.get("pacote_id"),
        compra_pacote_id=dados.get("compra_pacote_id"),
        profissional_id=dados.get("profissional_id"),
        data_hora=para_utc(dados["data_hora"]),
        observacoes=dados.get("observacoes") or "",
        servico_avulso_nome=dados.get("servico_avulso_nome"),
        servico_avulso_valor=dados.get("servico_avulso_valor"),
    )
    db.add(agendamento)
    db.flush()
    return agendamento


def _aplicar_efeito_financeiro(db: Session, tenant_id: str, agendamento: Agendamento):
    if agendamento.compra_pacote_id is not None:
        compra = compras_service.obter_compra(db, tenant_id, agendamento.compra_pacote_id)
        valor_sessao = arredondar(compra.pacote.valor_por_sessao)

        compras_service.consumir_sessao(
            db,
            tenant_id,
            compra.id,
            agendamento_id=agendamento.id,
            valor_cobrado=valor_sessao,
            profissional_id=agendamento.profissional_id,
        )
        agendamento.valor_cobrado = valor_sessao
        agendamento.status_pagamento = StatusPagamento.PAGO.value

    elif agendamento.servico_avulso_valor:
        agendamento.valor_cobrado = agendamento.servico_avulso_valor
        agendamento.status_pagamento = StatusPagamento.PENDENTE.value
        logger.info(
            f"Agendamento {agendamento.id} realizado; serviço avulso de "
            f"{agendamento.servico_avulso_valor} aguardando pagamento"
        )

    else:
        logger.warning(
            f"Agendamento {agendamento.id} realizado sem pacote nem serviço avulso; "
            f"nenhuma cobrança gerada"
        )


def atualizar_status(db: Session, tenant_id: str, agendamento_id: int, status: str) -> Agendamento:
    """
    Altera o status do agendamento.

    Só a entrada em "Realizado" tem efeito financeiro; sair dele não
    devolve a sessão consumida.
    """
    agendamento = obter_agendamento(db, tenant_id, agendamento_id)
    anterior = agendamento.status

    if status == StatusAgendamento.REALIZADO.value and anterior != status:
        _aplicar_efeito_financeiro(db, tenant_id, agendamento)

    agendamento.status = status
    db.flush()

    logger.info(f"Agendamento {agendamento.id}: {anterior} -> {status}")
    return agendamento


def registrar_pagamento(
    db: Session,
    tenant_id: str,
    agendamento_id: int,
    forma_pagamento: str,
    valor: Optional[float] = None,
    data_pagamento: Optional[datetime] = None,
    dados: Optional[dict] = None,
    observacoes: Optional[str] = None,
) -> Tuple[Pagamento, Transacao, Agendamento]:
    """
    Cobra um serviço avulso realizado.

    Cria (ou reaproveita) a receita de Serviço Avulso do agendamento e
    registra o pagamento; sem valor informado, cobra o pendente.
    """
    agendamento = obter_agendamento(db, tenant_id, agendamento_id)

    if agendamento.compra_pacote_id is not None:
        raise ErroEstado("Agendamento de pacote não é cobrado avulso")
    if not agendamento.servico_avulso_valor:
        raise ErroEstado("Agendamento não possui serviço avulso a cobrar")
    if agendamento.status_pagamento == StatusPagamento.PAGO.value:
        raise ErroEstado("Agendamento já está pago")

    transacao = (
        db.query(Transacao)
        .filter(
            Transacao.tenant_id == tenant_id,
            Transacao.agendamento_id == agendamento.id,
            Transacao.status_pagamento.notin_(STATUS_ENCERRADOS),
        )
        .first()
    )
    if transacao is None:
        nome_servico = agendamento.servico_avulso_nome or "Serviço avulso"
        transacao = Transacao(
            tenant_id=tenant_id,
            tipo=TipoTransacao.RECEITA.value,
            categoria=CategoriaTransacao.SERVICO_AVULSO.value,
            agendamento_id=agendamento.id,
            cliente_id=agendamento.cliente_id,
            profissional_id=agendamento.profissional_id,
            valor=agendamento.servico_avulso_valor,
            desconto=0.0,
            descricao=f"{nome_servico} - {agendamento.cliente.nome}",
        )
        db.add(transacao)
        db.flush()

    pagamento = pagamentos_service.registrar_pagamento(
        db,
        transacao,
        valor=valor if valor is not None else transacao.valor_pendente,
        forma_pagamento=forma_pagamento,
        data_pagamento=data_pagamento,
        dados=dados,
        observacoes=observacoes,
    )

    agendamento.valor_cobrado = agendamento.servico_avulso_valor
    agendamento.status_pagamento = transacao.status_pagamento
    db.flush()
    return pagamento, transacao, agendamento
