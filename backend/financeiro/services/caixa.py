"""
Serviço do caixa diário: abertura, sangria, suprimento, fechamento e status

O caixa de um dia é a SessaoCaixa (tenant + data local). Abertura, sangria,
suprimento e fechamento também geram transações, ligadas à sessão e
marcadas com `movimento_caixa`. Receitas e despesas do dia vêm dos
pagamentos registrados no dia.
"""

import logging
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from financeiro.core.datas import (
    agora,
    formatar_data,
    formatar_euro,
    formatar_hora,
    hoje,
    limites_do_dia,
)
from financeiro.core.enums import (
    CategoriaTransacao,
    FormaPagamento,
    MovimentoCaixa,
    StatusPagamento,
    TipoTransacao,
)
from financeiro.core.exceptions import ErroEstado, ErroValidacao
from financeiro.models import Pagamento, SessaoCaixa, Transacao
from financeiro.models.base import arredondar

logger = logging.getLogger(__name__)


def _sessao_do_dia(db: Session, tenant_id: str, dia: date) -> Optional[SessaoCaixa]:
    return (
        db.query(SessaoCaixa)
        .filter(SessaoCaixa.tenant_id == tenant_id, SessaoCaixa.data == dia)
        .first()
    )


def _obter_ou_criar_sessao(db: Session, tenant_id: str, dia: date) -> SessaoCaixa:
    sessao = _sessao_do_dia(db, tenant_id, dia)
    if sessao is None:
        sessao = SessaoCaixa(tenant_id=tenant_id, data=dia, valor_abertura=0.0)
        db.add(sessao)
        _flush_sessao(db)
    return sessao


def _flush_sessao(db: Session):
    # A restrição única (tenant, data) resolve aberturas simultâneas
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ErroEstado("Caixa já foi aberto hoje")


def _movimento(
    sessao: SessaoCaixa,
    movimento: MovimentoCaixa,
    tipo: TipoTransacao,
    valor: float,
    descricao: str,
    observacoes: str = "",
    forma_pagamento: str = FormaPagamento.DINHEIRO.value,
) -> Transacao:
    return Transacao(
        tenant_id=sessao.tenant_id,
        tipo=tipo.value,
        categoria=CategoriaTransacao.OUTROS.value,
        valor=valor,
        desconto=0.0,
        descricao=descricao,
        observacoes=observacoes,
        status_pagamento=StatusPagamento.PAGO.value,
        forma_pagamento=forma_pagamento,
        data_pagamento=agora(),
        sessao_caixa=sessao,
        movimento_caixa=movimento.value,
    )


def abrir_caixa(
    db: Session,
    tenant_id: str,
    valor_inicial: float = 0.0,
    usuario_id: Optional[str] = None,
) -> Tuple[SessaoCaixa, Optional[Transacao]]:
    if valor_inicial is None or valor_inicial < 0:
        raise ErroValidacao("Valor inicial não pode ser negativo")

    dia = hoje()
    sessao = _sessao_do_dia(db, tenant_id, dia)
    if sessao is not None and sessao.aberto:
        raise ErroEstado("Caixa já foi aberto hoje")
    if sessao is not None and sessao.fechado:
        raise ErroEstado("Caixa já foi fechado hoje")

    if sessao is None:
        sessao = SessaoCaixa(tenant_id=tenant_id, data=dia)
        db.add(sessao)

    sessao.aberto_em = agora()
    sessao.aberto_por = usuario_id
    sessao.valor_abertura = arredondar(valor_inicial)

    transacao = None
    if valor_inicial > 0:
        transacao = _movimento(
            sessao,
            MovimentoCaixa.ABERTURA,
            TipoTransacao.RECEITA,
            valor_inicial,
            f"Abertura de Caixa - {formatar_data(dia)}",
            observacoes="Valor inicial do caixa",
        )
        db.add(transacao)

    _flush_sessao(db)
    logger.info(f"Caixa aberto: tenant={tenant_id}, data={dia}, valor_inicial={valor_inicial}")
    return sessao, transacao


def _registrar_ajuste(
    db: Session,
    tenant_id: str,
    movimento: MovimentoCaixa,
    valor: float,
    motivo: str,
    forma_pagamento: Optional[str] = None,
) -> Transacao:
    nome = "Sangria" if movimento == MovimentoCaixa.SANGRIA else "Suprimento"

    if valor is None or valor <= 0:
        raise ErroValidacao(f"Valor do {nome.lower()} deve ser maior que zero")
    if not motivo or not motivo.strip():
        raise ErroValidacao(f"Motivo do {nome.lower()} é obrigatório")
    if forma_pagamento is not None and forma_pagamento not in [f.value for f in FormaPagamento]:
        raise ErroValidacao(f"Forma de pagamento inválida: {forma_pagamento}")

    dia = hoje()
    sessao = _obter_ou_criar_sessao(db, tenant_id, dia)
    if sessao.fechado:
        raise ErroEstado("Caixa já foi fechado hoje")

    tipo = TipoTransacao.DESPESA if movimento == MovimentoCaixa.SANGRIA else TipoTransacao.RECEITA
    transacao = _movimento(
        sessao,
        movimento,
        tipo,
        valor,
        f"{nome} - {motivo.strip()}",
        observacoes=f"{nome} realizado em {formatar_data(dia)} {formatar_hora(agora())}",
        forma_pagamento=forma_pagamento or FormaPagamento.DINHEIRO.value,
    )
    db.add(transacao)
    db.flush()

    logger.info(f"{nome} registrado: tenant={tenant_id}, valor={valor}, motivo={motivo}")
    return transacao


def registrar_sangria(db: Session, tenant_id: str, valor: float, motivo: str,
                      forma_pagamento: Optional[str] = None) -> Transacao:
    """Retirada de dinheiro do caixa"""
    return _registrar_ajuste(db, tenant_id, MovimentoCaixa.SANGRIA, valor, motivo, forma_pagamento)


def registrar_suprimento(db: Session, tenant_id: str, valor: float, motivo: str,
                         forma_pagamento: Optional[str] = None) -> Transacao:
    """Entrada de dinheiro no caixa (troco, reforço)"""
    return _registrar_ajuste(db, tenant_id, MovimentoCaixa.SUPRIMENTO, valor, motivo, forma_pagamento)


def movimentacao_do_dia(db: Session, tenant_id: str, dia: date) -> dict:
    """
    Totais do dia: receitas/despesas pelos pagamentos do dia e
    suprimentos/sangrias pelos movimentos da sessão.

    saldoAtual = abertura + receitas - despesas + suprimentos - sangrias
    """
    inicio, fim = limites_do_dia(dia)
    sessao = _sessao_do_dia(db, tenant_id, dia)

    pagamentos = (
        db.query(Pagamento.valor, Pagamento.forma_pagamento, Transacao.tipo)
        .join(Transacao, Pagamento.transacao_id == Transacao.id)
        .filter(
            Pagamento.tenant_id == tenant_id,
            Pagamento.data_pagamento >= inicio,
            Pagamento.data_pagamento < fim,
        )
        .all()
    )

    totais_por_forma = {}
    receitas = 0.0
    despesas = 0.0
    for valor, forma, tipo in pagamentos:
        totais = totais_por_forma.setdefault(forma, {"receitas": 0.0, "despesas": 0.0, "quantidade": 0})
        totais["quantidade"] += 1
        if tipo == TipoTransacao.RECEITA.value:
            totais["receitas"] = arredondar(totais["receitas"] + valor)
            receitas += valor
        else:
            totais["despesas"] = arredondar(totais["despesas"] + valor)
            despesas += valor

    sangrias = []
    suprimentos = []
    if sessao is not None:
        for movimento in sessao.movimentos:
            if movimento.status_pagamento != StatusPagamento.PAGO.value:
                continue
            if movimento.movimento_caixa == MovimentoCaixa.SANGRIA.value:
                sangrias.append(movimento)
            elif movimento.movimento_caixa == MovimentoCaixa.SUPRIMENTO.value:
                suprimentos.append(movimento)

    abertura = sessao.valor_abertura if sessao is not None and sessao.aberto else 0.0
    total_sangrias = sum(s.valor_final for s in sangrias)
    total_suprimentos = sum(s.valor_final for s in suprimentos)
    saldo = abertura + receitas - despesas + total_suprimentos - total_sangrias

    return {
        "sessao": sessao,
        "movimentacao": {
            "receitas": arredondar(receitas),
            "despesas": arredondar(despesas),
            "suprimentos": arredondar(total_suprimentos),
            "sangrias": arredondar(total_sangrias),
            "saldoAtual": arredondar(saldo),
        },
        "totaisPorForma": totais_por_forma,
        "detalhes": {
            "quantidadeSangrias": len(sangrias),
            "quantidadeSuprimentos": len(suprimentos),
            "quantidadePagamentos": len(pagamentos),
        },
    }


def status_caixa(db: Session, tenant_id: str, dia: Optional[date] = None) -> dict:
    """Situação do caixa de um dia (hoje por padrão); apenas leitura"""
    dia = dia or hoje()
    dados = movimentacao_do_dia(db, tenant_id, dia)
    sessao = dados.pop("sessao")

    abertura = None
    fechamento = None
    if sessao is not None and sessao.aberto:
        abertura = {
            "horario": formatar_hora(sessao.aberto_em),
            "valor": sessao.valor_abertura,
            "abertoPor": sessao.aberto_por,
        }
    if sessao is not None and sessao.fechado:
        fechamento = {
            "horario": formatar_hora(sessao.fechado_em),
            "saldoEsperado": sessao.saldo_esperado,
            "saldoContado": sessao.saldo_contado,
            "diferenca": sessao.diferenca,
            "observacoes": sessao.observacoes,
        }

    return {
        "data": formatar_data(dia),
        "status": "Fechado" if fechamento else "Aberto",
        "abertura": abertura,
        "fechamento": fechamento,
        **dados,
    }


def fechar_caixa(
    db: Session,
    tenant_id: str,
    saldo_contado: float,
    observacoes: Optional[str] = None,
    usuario_id: Optional[str] = None,
) -> Tuple[SessaoCaixa, Transacao]:
    """
    Fecha o caixa de hoje.

    Diferença = contado - esperado. O lançamento de fechamento é uma receita
    (sobra) ou despesa (falta) de valor |diferença|; os três valores ficam
    também nas observações e na própria sessão.
    """
    if saldo_contado is None or saldo_contado < 0:
        raise ErroValidacao("Saldo contado não pode ser negativo")

    dia = hoje()
    sessao = _obter_ou_criar_sessao(db, tenant_id, dia)
    if sessao.fechado:
        raise ErroEstado("Caixa já foi fechado hoje")

    movimentacao = movimentacao_do_dia(db, tenant_id, dia)["movimentacao"]
    saldo_esperado = movimentacao["saldoAtual"]
    saldo_contado = arredondar(saldo_contado)
    diferenca = arredondar(saldo_contado - saldo_esperado)

    notas = (
        f"{observacoes or ''}\n\n"
        f"Saldo Esperado: {formatar_euro(saldo_esperado)}\n"
        f"Saldo Contado: {formatar_euro(saldo_contado)}\n"
        f"Diferença: {formatar_euro(diferenca)}"
    )

    transacao = _movimento(
        sessao,
        MovimentoCaixa.FECHAMENTO,
        TipoTransacao.RECEITA if diferenca >= 0 else TipoTransacao.DESPESA,
        abs(diferenca),
        f"Fechamento de Caixa - {formatar_data(dia)}",
        observacoes=notas,
    )
    db.add(transacao)

    sessao.fechado_em = agora()
    sessao.fechado_por = usuario_id
    sessao.saldo_esperado = saldo_esperado
    sessao.saldo_contado = saldo_contado
    sessao.diferenca = diferenca
    sessao.observacoes = observacoes
    db.flush()

    logger.info(
        f"Caixa fechado: tenant={tenant_id}, data={dia}, esperado={saldo_esperado}, "
        f"contado={saldo_contado}, diferenca={diferenca}"
    )
    return sessao, transacao


def relatorio_caixas(
    db: Session,
    tenant_id: str,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    limit: int = 30,
) -> List[dict]:
    """Histórico de fechamentos, mais recentes primeiro"""
    query = db.query(SessaoCaixa).filter(
        SessaoCaixa.tenant_id == tenant_id,
        SessaoCaixa.fechado_em.isnot(None),
    )
    if data_inicio:
        query = query.filter(SessaoCaixa.data >= data_inicio)
    if data_fim:
        query = query.filter(SessaoCaixa.data <= data_fim)

    return [
        {
            "data": formatar_data(sessao.data),
            "valorAbertura": sessao.valor_abertura,
            "saldoEsperado": sessao.saldo_esperado,
            "saldoContado": sessao.saldo_contado,
            "diferenca": sessao.diferenca,
            "horarioFechamento": formatar_hora(sessao.fechado_em),
            "observacoes": sessao.observacoes,
        }
        for sessao in query.order_by(SessaoCaixa.data.desc()).limit(limit).all()
    ]
