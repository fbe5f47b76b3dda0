"""
Testes dos relatórios de pagamentos e transações
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from financeiro.core.datas import hoje


@pytest.fixture
def movimentos(client, criar_transacao):
    venda = criar_transacao(valor=100.0, categoria="Produto")
    servico = criar_transacao(valor=60.0, categoria="Serviço Avulso")
    fornecedor = criar_transacao(valor=40.0, tipo="Despesa", categoria="Fornecedor")

    def pagar(transacao, valor, forma="Dinheiro", **dados):
        resposta = client.post(
            f"/transacoes/{transacao['id']}/pagamento",
            json={"valor": valor, "formaPagamento": forma, **dados},
        )
        assert resposta.status_code == 201, resposta.text

    pagar(venda, 100.0)
    pagar(servico, 60.0, "MBWay", dadosMBWay={"telefone": "912345678"})
    pagar(fornecedor, 40.0, "Transferência Bancária",
          dadosTransferencia={"iban": "PT50000201231234567890154"})


def test_estatisticas_por_forma(client, movimentos):
    corpo = client.get("/pagamentos/estatisticas/formas-pagamento").json()

    formas = [e["formaPagamento"] for e in corpo["estatisticas"]]
    assert formas == ["Dinheiro", "MBWay", "Transferência Bancária"]
    assert corpo["estatisticas"][0]["percentual"] == 50.0
    assert corpo["totais"]["totalGeral"] == 200.0
    assert corpo["totais"]["quantidadeGeral"] == 3


def test_resumo_diario(client, movimentos):
    corpo = client.get("/pagamentos/resumo/diario").json()

    assert corpo["data"] == hoje().isoformat()
    assert corpo["totais"]["quantidadeTotal"] == 3
    assert corpo["totais"]["receitas"] == 160.0
    assert corpo["totais"]["despesas"] == 40.0
    assert corpo["resumoPorForma"]["MBWay"] == {"quantidade": 1, "valor": 60.0}


def test_resumo_mensal(client, movimentos):
    dia = hoje()

    corpo = client.get("/pagamentos/resumo/mensal", params={"mes": dia.month, "ano": dia.year}).json()

    assert corpo["totais"]["valorTotal"] == 200.0
    assert corpo["pagamentosPorDia"] == [{"dia": dia.day, "total": 200.0, "quantidade": 3}]


def test_relatorio_periodo(client, movimentos):
    dia = hoje().isoformat()

    corpo = client.get("/transacoes/relatorio/periodo", params={"dataInicio": dia, "dataFim": dia}).json()

    assert corpo["resumo"] == {
        "receitas": 160.0,
        "despesas": 40.0,
        "saldo": 120.0,
        "quantidadeTransacoes": 3,
    }
    assert corpo["resumoPorCategoria"][0]["categoria"] == "Produto"
    assert corpo["formasPagamento"]["Dinheiro"]["valor"] == 100.0


def test_relatorio_periodo_exige_datas(client):
    assert client.get("/transacoes/relatorio/periodo").status_code == 422


def test_relatorios_vazios(client):
    assert client.get("/pagamentos/resumo/diario").json()["totais"]["valorTotal"] == 0.0
    assert client.get("/pagamentos/estatisticas/formas-pagamento").json()["estatisticas"] == []
    assert client.get("/compras-pacotes/estatisticas").json()["totais"]["quantidade"] == 0
