"""
Serviço de compras de pacotes: venda, consumo de sessões, prazo e cancelamento
"""

import logging
from datetime import timedelta
from typing import List, Optional, Tuple

from sqlalchemy import and_, or_, update
from sqlalchemy.orm import Session

from financeiro.core.config import settings
from financeiro.core.datas import agora
from financeiro.core.enums import (
    CategoriaTransacao,
    FormaPagamento,
    StatusCompraPacote,
    StatusPagamento,
    TipoTransacao,
)
from financeiro.core.exceptions import ErroEstado, ErroValidacao, NaoEncontrado
from financeiro.models import Agendamento, Cliente, CompraPacote, Pacote, Transacao
from financeiro.services import pagamentos as pagamentos_service

logger = logging.getLogger(__name__)

# Status em que a venda não tem mais valor a receber
STATUS_SEM_PENDENCIA = (
    StatusPagamento.PAGO.value,
    StatusPagamento.CANCELADO.value,
    StatusPagamento.ESTORNADO.value,
)


def obter_compra(db: Session, tenant_id: str, compra_id: int) -> CompraPacote:
    compra = (
        db.query(CompraPacote)
        .filter(CompraPacote.id == compra_id, CompraPacote.tenant_id == tenant_id)
        .first()
    )
    if not compra:
        raise NaoEncontrado("Compra de pacote não encontrada")
    return compra


def vender_pacote(
    db: Session,
    tenant_id: str,
    cliente_id: int,
    pacote_id: int,
    dias_validade: Optional[int] = None,
    parcelado: bool = False,
    numero_parcelas: int = 1,
    valor_pago: float = 0.0,
    forma_pagamento: Optional[str] = None,
    dados_pagamento: Optional[dict] = None,
) -> Tuple[CompraPacote, Transacao]:
    """
    Vende um pacote a um cliente.

    Cria a CompraPacote a partir da definição do pacote e a transação de
    receita correspondente. Um valor pago na venda entra como pagamento
    real (Dinheiro por padrão), visível no caixa do dia.

    Returns:
        (compra, transacao)
    """
    cliente = (
        db.query(Cliente)
        .filter(Cliente.id == cliente_id, Cliente.tenant_id == tenant_id)
        .first()
    )
    if not cliente:
        raise NaoEncontrado("Cliente não encontrado")

    pacote = (
        db.query(Pacote)
        .filter(Pacote.id == pacote_id, Pacote.tenant_id == tenant_id)
        .first()
    )
    if not pacote:
        raise NaoEncontrado("Pacote não encontrado")
    if not pacote.ativo:
        raise ErroEstado("Pacote não está ativo para venda")

    valor_pago = valor_pago or 0.0
    if valor_pago < 0:
        raise ErroValidacao("Valor pago não pode ser negativo")
    if valor_pago > pacote.valor:
        raise ErroValidacao("Valor pago não pode ser maior que o valor do pacote")
    if dias_validade is not None and dias_validade <= 0:
        raise ErroValidacao("Dias de validade deve ser maior que zero")

    compra = CompraPacote(
        tenant_id=tenant_id,
        cliente_id=cliente.id,
        pacote_id=pacote.id,
        sessoes_contratadas=pacote.sessoes,
        sessoes_usadas=0,
        valor_total=pacote.valor,
        valor_pago=0.0,
        parcelado=parcelado,
        numero_parcelas=numero_parcelas if parcelado else 1,
        dias_validade=dias_validade,
        data_compra=agora(),
    )
    db.add(compra)
    db.flush()

    transacao = Transacao(
        tenant_id=tenant_id,
        tipo=TipoTransacao.RECEITA.value,
        categoria=CategoriaTransacao.PACOTE.value,
        cliente_id=cliente.id,
        compra_pacote=compra,
        valor=pacote.valor,
        desconto=0.0,
        descricao=f"Venda de pacote: {pacote.nome} - {cliente.nome}",
        parcelado=compra.parcelado,
        numero_parcelas=compra.numero_parcelas,
    )
    db.add(transacao)
    db.flush()

    if valor_pago > 0:
        pagamentos_service.registrar_pagamento(
            db,
            transacao,
            valor=valor_pago,
            forma_pagamento=forma_pagamento or FormaPagamento.DINHEIRO.value,
            dados=dados_pagamento,
        )

    logger.info(
        f"Pacote vendido: compra={compra.id}, pacote={pacote.id}, cliente={cliente.id}, "
        f"valor_total={compra.valor_total}, valor_pago={compra.valor_pago}"
    )
    return compra, transacao


def consumir_sessao(
    db: Session,
    tenant_id: str,
    compra_id: int,
    agendamento_id: Optional[int],
    valor_cobrado: float,
    profissional_id: Optional[str] = None,
) -> CompraPacote:
    """
    Consome uma sessão do pacote.

    O decremento é um UPDATE condicional (sessões restantes, status Ativo e
    prazo válido), de modo que duas chamadas simultâneas nunca levam
    sessoes_restantes abaixo de zero. Se nenhuma linha for afetada, a compra
    é relida para devolver o erro exato; um pacote vencido passa a Expirado
    e essa mudança é gravada (commit) antes do erro. Esse commit leva junto
    tudo o que a sessão tiver pendente: não acumule escritas antes de chamar.
    """
    momento = agora()

    resultado = db.execute(
        update(CompraPacote)
        .where(
            CompraPacote.id == compra_id,
            CompraPacote.tenant_id == tenant_id,
            CompraPacote.status == StatusCompraPacote.ATIVO.value,
            CompraPacote.sessoes_restantes > 0,
            or_(
                CompraPacote.data_expiracao.is_(None),
                CompraPacote.data_expiracao >= momento,
            ),
        )
        .values(
            sessoes_usadas=CompraPacote.sessoes_usadas + 1,
            sessoes_restantes=CompraPacote.sessoes_restantes - 1,
            updated_at=momento,
        )
        .execution_options(synchronize_session=False)
    )

    compra = obter_compra(db, tenant_id, compra_id)
    db.refresh(compra)

    if resultado.rowcount == 0:
        status_anterior = compra.status
        try:
            compra.validar_uso(momento)
        except ErroEstado:
            if compra.status != status_anterior:
                db.commit()
                logger.info(f"Compra {compra.id} marcada como {compra.status}")
            raise
        # Outra requisição consumiu a última sessão entre o UPDATE e a releitura
        raise ErroEstado("Pacote não possui sessões restantes")

    compra.registrar_uso(agendamento_id, valor_cobrado, profissional_id, momento)
    db.flush()

    logger.info(
        f"Sessão {compra.sessoes_usadas}/{compra.sessoes_contratadas} usada: "
        f"compra={compra.id}, agendamento={agendamento_id}"
    )
    return compra


def estender_prazo(
    db: Session,
    tenant_id: str,
    compra_id: int,
    dias: int,
    motivo: Optional[str] = None,
    usuario_id: Optional[str] = None,
) -> CompraPacote:
    compra = obter_compra(db, tenant_id, compra_id)

    if compra.status in (StatusCompraPacote.CONCLUIDO.value, StatusCompraPacote.CANCELADO.value):
        raise ErroEstado(f"Não é possível estender o prazo de um pacote {compra.status.lower()}")

    compra.estender_prazo(dias, motivo, usuario_id)
    db.flush()

    logger.info(f"Prazo da compra {compra.id} estendido em {dias} dias até {compra.data_expiracao}")
    return compra


def cancelar_compra(
    db: Session,
    tenant_id: str,
    compra_id: int,
    motivo: str = "",
    usuario_id: Optional[str] = None,
) -> CompraPacote:
    """Cancela a compra e a transação de venda ainda não quitada (pendente ou parcial)"""
    compra = obter_compra(db, tenant_id, compra_id)

    if compra.status == StatusCompraPacote.CANCELADO.value:
        raise ErroEstado("Pacote já está cancelado")
    if compra.status == StatusCompraPacote.CONCLUIDO.value:
        raise ErroEstado("Não é possível cancelar um pacote concluído")

    compra.cancelar(motivo, usuario_id)

    pendentes = (
        db.query(Transacao)
        .filter(
            Transacao.tenant_id == tenant_id,
            Transacao.compra_pacote_id == compra.id,
            Transacao.status_pagamento.notin_(STATUS_SEM_PENDENCIA),
        )
        .all()
    )
    for transacao in pendentes:
        transacao.cancelar(f"Pacote cancelado: {motivo}" if motivo else "Pacote cancelado")

    db.flush()
    logger.info(f"Compra {compra.id} cancelada ({len(pendentes)} transação(ões) em aberto cancelada(s))")
    return compra


def deletar_compra(db: Session, tenant_id: str, compra_id: int) -> None:
    """Remove a compra; transações e agendamentos ficam sem o vínculo"""
    compra = obter_compra(db, tenant_id, compra_id)

    transacoes = (
        db.query(Transacao)
        .filter(Transacao.tenant_id == tenant_id, Transacao.compra_pacote_id == compra.id)
        .update({Transacao.compra_pacote_id: None}, synchronize_session=False)
    )
    agendamentos = (
        db.query(Agendamento)
        .filter(Agendamento.tenant_id == tenant_id, Agendamento.compra_pacote_id == compra.id)
        .update({Agendamento.compra_pacote_id: None}, synchronize_session=False)
    )

    db.delete(compra)
    db.flush()
    logger.info(
        f"Compra {compra_id} deletada; desvinculadas {transacoes} transação(ões) "
        f"e {agendamentos} agendamento(s)"
    )


# ----------------------------------------------------------------------
# Consultas
# ----------------------------------------------------------------------

def _filtro_expirando(dias: int):
    momento = agora()
    return and_(
        CompraPacote.status == StatusCompraPacote.ATIVO.value,
        CompraPacote.data_expiracao.isnot(None),
        CompraPacote.data_expiracao >= momento,
        CompraPacote.data_expiracao <= momento + timedelta(days=dias),
    )


def _filtro_poucas_sessoes(limite: int):
    return and_(
        CompraPacote.status == StatusCompraPacote.ATIVO.value,
        CompraPacote.sessoes_restantes > 0,
        CompraPacote.sessoes_restantes <= limite,
    )


def listar_compras(
    db: Session,
    tenant_id: str,
    status: Optional[str] = None,
    cliente_id: Optional[int] = None,
    pacote_id: Optional[int] = None,
    expirando: bool = False,
    dias: Optional[int] = None,
    poucas_sessoes: bool = False,
    limite_sessoes: Optional[int] = None,
    limit: Optional[int] = None,
    page: int = 1,
) -> Tuple[List[CompraPacote], int]:
    query = db.query(CompraPacote).filter(CompraPacote.tenant_id == tenant_id)

    if status:
        query = query.filter(CompraPacote.status == status)
    if cliente_id:
        query = query.filter(CompraPacote.cliente_id == cliente_id)
    if pacote_id:
        query = query.filter(CompraPacote.pacote_id == pacote_id)
    if expirando:
        query = query.filter(_filtro_expirando(dias or settings.dias_alerta_expiracao))
    if poucas_sessoes:
        query = query.filter(_filtro_poucas_sessoes(limite_sessoes or settings.limite_poucas_sessoes))

    total = query.count()
    limit = limit or settings.limite_padrao
    compras = (
        query.order_by(CompraPacote.data_compra.desc())
        .offset((max(page, 1) - 1) * limit)
        .limit(limit)
        .all()
    )
    return compras, total


def compras_expirando(db: Session, tenant_id: str, dias: Optional[int] = None) -> List[CompraPacote]:
    return (
        db.query(CompraPacote)
        .filter(
            CompraPacote.tenant_id == tenant_id,
            _filtro_expirando(dias or settings.dias_alerta_expiracao),
        )
        .order_by(CompraPacote.data_expiracao)
        .all()
    )


def compras_com_poucas_sessoes(
    db: Session, tenant_id: str, limite: Optional[int] = None
) -> List[CompraPacote]:
    return (
        db.query(CompraPacote)
        .filter(
            CompraPacote.tenant_id == tenant_id,
            _filtro_poucas_sessoes(limite or settings.limite_poucas_sessoes),
        )
        .order_by(CompraPacote.sessoes_restantes)
        .all()
    )


def compras_do_cliente(
    db: Session, tenant_id: str, cliente_id: int, status: Optional[str] = None
) -> List[CompraPacote]:
    query = db.query(CompraPacote).filter(
        CompraPacote.tenant_id == tenant_id, CompraPacote.cliente_id == cliente_id
    )
    if status:
        query = query.filter(CompraPacote.status == status)
    return query.order_by(CompraPacote.data_compra.desc()).all()


def alertas(db: Session, tenant_id: str) -> dict:
    expirando = compras_expirando(db, tenant_id)
    poucas = compras_com_poucas_sessoes(db, tenant_id)
    return {
        "expirando": expirando,
        "poucas_sessoes": poucas,
        "total_alertas": len(expirando) + len(poucas),
    }
