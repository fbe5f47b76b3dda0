"""
Relatórios financeiros (agregações com pandas)

Cada relatório carrega as linhas do período já filtradas por tenant e
agrupa em memória; os volumes de um salão cabem folgadamente num DataFrame.
"""

import calendar
import logging
from datetime import date
from typing import Optional

import pandas as pd
from sqlalchemy.orm import Session

from financeiro.core.datas import dia_local, formatar_data, hoje, limites_do_periodo
from financeiro.core.enums import StatusPagamento, TipoTransacao
from financeiro.core.exceptions import ErroValidacao
from financeiro.models import CompraPacote, Pagamento, Transacao
from financeiro.models.base import arredondar

logger = logging.getLogger(__name__)

COLUNAS_PAGAMENTOS = ["valor", "forma", "dia", "tipo"]


def _pagamentos_df(db: Session, tenant_id: str, inicio: date, fim: date) -> pd.DataFrame:
    """Pagamentos do período (dias locais, inclusivos) com o tipo da transação"""
    limite_inicio, limite_fim = limites_do_periodo(inicio, fim)
    linhas = (
        db.query(Pagamento.valor, Pagamento.forma_pagamento, Pagamento.data_pagamento, Transacao.tipo)
        .join(Transacao, Pagamento.transacao_id == Transacao.id)
        .filter(
            Pagamento.tenant_id == tenant_id,
            Pagamento.data_pagamento >= limite_inicio,
            Pagamento.data_pagamento < limite_fim,
        )
        .all()
    )
    return pd.DataFrame(
        [(valor, forma, dia_local(data), tipo) for valor, forma, data, tipo in linhas],
        columns=COLUNAS_PAGAMENTOS,
    )


def _resumo_por_forma(df: pd.DataFrame) -> dict:
    if df.empty:
        return {}
    agrupado = df.groupby("forma")["valor"].agg(["count", "sum"])
    return {
        forma: {"quantidade": int(linha["count"]), "valor": arredondar(linha["sum"])}
        for forma, linha in agrupado.iterrows()
    }


def estatisticas_formas_pagamento(
    db: Session,
    tenant_id: str,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
) -> dict:
    """Total, quantidade, média e participação de cada forma de pagamento"""
    data_fim = data_fim or hoje()
    data_inicio = data_inicio or data_fim.replace(day=1)
    if data_inicio > data_fim:
        raise ErroValidacao("dataInicio deve ser anterior a dataFim")

    df = _pagamentos_df(db, tenant_id, data_inicio, data_fim)

    estatisticas = []
    total_geral = arredondar(df["valor"].sum()) if not df.empty else 0.0
    quantidade_geral = len(df)

    if not df.empty:
        agrupado = (
            df.groupby("forma")["valor"]
            .agg(["sum", "count", "mean"])
            .sort_values("sum", ascending=False)
        )
        for forma, linha in agrupado.iterrows():
            estatisticas.append({
                "formaPagamento": forma,
                "total": arredondar(linha["sum"]),
                "quantidade": int(linha["count"]),
                "media": arredondar(linha["mean"]),
                "percentual": round(linha["sum"] / total_geral * 100, 1) if total_geral else 0.0,
            })

    return {
        "periodo": {"dataInicio": formatar_data(data_inicio), "dataFim": formatar_data(data_fim)},
        "estatisticas": estatisticas,
        "totais": {
            "totalGeral": total_geral,
            "quantidadeGeral": quantidade_geral,
            "mediaGeral": arredondar(total_geral / quantidade_geral) if quantidade_geral else 0.0,
        },
    }


def resumo_diario(db: Session, tenant_id: str, dia: Optional[date] = None) -> dict:
    dia = dia or hoje()
    df = _pagamentos_df(db, tenant_id, dia, dia)

    receitas = df.loc[df["tipo"] == TipoTransacao.RECEITA.value, "valor"].sum() if not df.empty else 0.0
    despesas = df.loc[df["tipo"] == TipoTransacao.DESPESA.value, "valor"].sum() if not df.empty else 0.0

    return {
        "data": dia.isoformat(),
        "resumoPorForma": _resumo_por_forma(df),
        "totais": {
            "quantidadeTotal": len(df),
            "valorTotal": arredondar(df["valor"].sum()) if not df.empty else 0.0,
            "receitas": arredondar(receitas),
            "despesas": arredondar(despesas),
        },
    }


def resumo_mensal(
    db: Session, tenant_id: str, ano: Optional[int] = None, mes: Optional[int] = None
) -> dict:
    """Pagamentos do mês por forma e por dia (para gráfico)"""
    referencia = hoje()
    ano = ano or referencia.year
    mes = mes or referencia.month
    if not 1 <= mes <= 12:
        raise ErroValidacao("Mês deve estar entre 1 e 12")

    dias_no_mes = calendar.monthrange(ano, mes)[1]
    df = _pagamentos_df(db, tenant_id, date(ano, mes, 1), date(ano, mes, dias_no_mes))

    pagamentos_por_dia = []
    if not df.empty:
        por_dia = df.groupby("dia")["valor"].agg(["sum", "count"]).sort_index()
        pagamentos_por_dia = [
            {"dia": dia.day, "total": arredondar(linha["sum"]), "quantidade": int(linha["count"])}
            for dia, linha in por_dia.iterrows()
        ]

    valor_total = arredondar(df["valor"].sum()) if not df.empty else 0.0
    return {
        "mes": mes,
        "ano": ano,
        "resumoPorForma": _resumo_por_forma(df),
        "pagamentosPorDia": pagamentos_por_dia,
        "totais": {
            "quantidadeTotal": len(df),
            "valorTotal": valor_total,
            "mediaDiaria": arredondar(valor_total / dias_no_mes),
        },
    }


def relatorio_periodo(db: Session, tenant_id: str, data_inicio: date, data_fim: date) -> dict:
    """
    Receitas, despesas e saldo das transações pagas no período, com
    quebra por tipo, por categoria e por forma de pagamento.
    """
    if data_inicio > data_fim:
        raise ErroValidacao("dataInicio deve ser anterior a dataFim")

    inicio, fim = limites_do_periodo(data_inicio, data_fim)
    linhas = (
        db.query(Transacao.tipo, Transacao.categoria, Transacao.valor_final)
        .filter(
            Transacao.tenant_id == tenant_id,
            Transacao.status_pagamento == StatusPagamento.PAGO.value,
            Transacao.data_pagamento >= inicio,
            Transacao.data_pagamento < fim,
        )
        .all()
    )
    df = pd.DataFrame([tuple(linha) for linha in linhas], columns=["tipo", "categoria", "valor"])

    resumo_por_tipo = []
    resumo_por_categoria = []
    if not df.empty:
        por_tipo = df.groupby("tipo")["valor"].agg(["sum", "count"])
        resumo_por_tipo = [
            {"tipo": tipo, "total": arredondar(linha["sum"]), "quantidade": int(linha["count"])}
            for tipo, linha in por_tipo.iterrows()
        ]
        por_categoria = (
            df.groupby(["tipo", "categoria"])["valor"]
            .agg(["sum", "count"])
            .sort_values("sum", ascending=False)
        )
        resumo_por_categoria = [
            {
                "tipo": tipo,
                "categoria": categoria,
                "total": arredondar(linha["sum"]),
                "quantidade": int(linha["count"]),
            }
            for (tipo, categoria), linha in por_categoria.iterrows()
        ]

    totais_tipo = {item["tipo"]: item["total"] for item in resumo_por_tipo}
    receitas = totais_tipo.get(TipoTransacao.RECEITA.value, 0.0)
    despesas = totais_tipo.get(TipoTransacao.DESPESA.value, 0.0)

    return {
        "periodo": {"dataInicio": formatar_data(data_inicio), "dataFim": formatar_data(data_fim)},
        "resumo": {
            "receitas": receitas,
            "despesas": despesas,
            "saldo": arredondar(receitas - despesas),
            "quantidadeTransacoes": len(df),
        },
        "resumoPorTipo": resumo_por_tipo,
        "resumoPorCategoria": resumo_por_categoria,
        "formasPagamento": _resumo_por_forma(_pagamentos_df(db, tenant_id, data_inicio, data_fim)),
    }


def estatisticas_compras(db: Session, tenant_id: str) -> dict:
    """Compras de pacotes por status e totais gerais (incluindo taxa de uso)"""
    linhas = (
        db.query(
            CompraPacote.status,
            CompraPacote.valor_total,
            CompraPacote.valor_pago,
            CompraPacote.sessoes_contratadas,
            CompraPacote.sessoes_usadas,
        )
        .filter(CompraPacote.tenant_id == tenant_id)
        .all()
    )
    colunas = ["status", "valorTotal", "valorPago", "sessoesContratadas", "sessoesUsadas"]
    df = pd.DataFrame([tuple(linha) for linha in linhas], columns=colunas)

    por_status = []
    if not df.empty:
        agrupado = df.groupby("status").agg(
            quantidade=("valorTotal", "size"),
            valorTotal=("valorTotal", "sum"),
            valorPago=("valorPago", "sum"),
            sessoesContratadas=("sessoesContratadas", "sum"),
            sessoesUsadas=("sessoesUsadas", "sum"),
        )
        por_status = [
            {
                "status": status,
                "quantidade": int(linha["quantidade"]),
                "valorTotal": arredondar(linha["valorTotal"]),
                "valorPago": arredondar(linha["valorPago"]),
                "sessoesContratadas": int(linha["sessoesContratadas"]),
                "sessoesUsadas": int(linha["sessoesUsadas"]),
            }
            for status, linha in agrupado.iterrows()
        ]

    valor_total = arredondar(df["valorTotal"].sum()) if not df.empty else 0.0
    valor_pago = arredondar(df["valorPago"].sum()) if not df.empty else 0.0
    contratadas = int(df["sessoesContratadas"].sum()) if not df.empty else 0
    usadas = int(df["sessoesUsadas"].sum()) if not df.empty else 0

    return {
        "porStatus": por_status,
        "totais": {
            "quantidade": len(df),
            "valorTotal": valor_total,
            "valorPago": valor_pago,
            "valorPendente": arredondar(valor_total - valor_pago),
            "sessoesContratadas": contratadas,
            "sessoesUsadas": usadas,
            "sessoesRestantes": contratadas - usadas,
            "taxaUso": round(usadas / contratadas * 100, 1) if contratadas else 0.0,
        },
    }
