"""
Testes da API do caixa diário
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from financeiro.core.datas import formatar_data, hoje


def test_abertura_mais_pagamento(client, criar_transacao):
    resposta = client.post("/caixa/abrir", json={"valorInicial": 50.0})
    assert resposta.status_code == 201, resposta.text
    assert resposta.json()["abertura"]["descricao"] == f"Abertura de Caixa - {formatar_data(hoje())}"

    transacao = criar_transacao(valor=30.0)
    client.post(f"/transacoes/{transacao['id']}/pagamento", json={"valor": 30.0, "formaPagamento": "Dinheiro"})

    status = client.get("/caixa/status").json()
    assert status["status"] == "Aberto"
    assert status["abertura"]["valor"] == 50.0
    assert status["movimentacao"]["receitas"] == 30.0
    assert status["movimentacao"]["saldoAtual"] == 80.0
    assert status["totaisPorForma"]["Dinheiro"] == {"receitas": 30.0, "despesas": 0.0, "quantidade": 1}
    assert status["detalhes"]["quantidadePagamentos"] == 1


def test_abrir_duas_vezes(client):
    assert client.post("/caixa/abrir", json={"valorInicial": 0}).status_code == 201

    resposta = client.post("/caixa/abrir", json={"valorInicial": 10.0})

    assert resposta.status_code == 400
    assert resposta.json()["detail"] == "Caixa já foi aberto hoje"


def test_abertura_sem_valor_nao_gera_transacao(client):
    resposta = client.post("/caixa/abrir", json={"valorInicial": 0})

    assert resposta.json()["abertura"] is None
    assert client.get("/transacoes").json()["total"] == 0
    assert client.get("/caixa/status").json()["abertura"]["valor"] == 0.0


def test_sangria_e_suprimento_sem_abertura(client):
    sangria = client.post("/caixa/sangria", json={"valor": 20.0, "motivo": "Pagamento de entregador"})
    suprimento = client.post("/caixa/suprimento", json={"valor": 10.0, "motivo": "Troco"})
    assert sangria.status_code == 201
    assert suprimento.status_code == 201

    status = client.get("/caixa/status").json()
    assert status["abertura"] is None
    assert status["movimentacao"]["sangrias"] == 20.0
    assert status["movimentacao"]["suprimentos"] == 10.0
    assert status["movimentacao"]["saldoAtual"] == -10.0
    assert status["detalhes"]["quantidadeSangrias"] == 1

    fechamento = client.post("/caixa/fechar", json={"saldoContado": 0}).json()["fechamento"]
    assert fechamento["saldoEsperado"] == -10.0
    assert fechamento["diferenca"] == 10.0


def test_sangria_sem_motivo(client):
    resposta = client.post("/caixa/sangria", json={"valor": 20.0})

    assert resposta.status_code == 400
    assert "Motivo" in resposta.json()["detail"]


def test_sangria_valor_invalido(client):
    resposta = client.post("/caixa/sangria", json={"valor": 0, "motivo": "x"})

    assert resposta.status_code == 400


def test_fechar_caixa(client, criar_transacao):
    client.post("/caixa/abrir", json={"valorInicial": 100.0})
    transacao = criar_transacao(valor=45.0)
    client.post(f"/transacoes/{transacao['id']}/pagamento", json={"valor": 45.0, "formaPagamento": "Dinheiro"})
    client.post("/caixa/sangria", json={"valor": 15.0, "motivo": "Compra de toalhas"})

    resposta = client.post("/caixa/fechar", json={"saldoContado": 125.0, "observacoes": "Fim do dia"})

    assert resposta.status_code == 201, resposta.text
    fechamento = resposta.json()["fechamento"]
    assert fechamento["saldoEsperado"] == 130.0
    assert fechamento["saldoContado"] == 125.0
    assert fechamento["diferenca"] == -5.0
    assert fechamento["observacoes"].startswith("Fim do dia\n\n")
    assert "Saldo Esperado: €130.00" in fechamento["observacoes"]
    assert "Saldo Contado: €125.00" in fechamento["observacoes"]
    assert "Diferença: €-5.00" in fechamento["observacoes"]

    lancamento = client.get(f"/transacoes/{fechamento['id']}").json()
    assert lancamento["tipo"] == "Despesa"
    assert lancamento["valorFinal"] == 5.0
    assert lancamento["descricao"] == f"Fechamento de Caixa - {formatar_data(hoje())}"
    assert lancamento["movimentoCaixa"] == "fechamento"

    status = client.get("/caixa/status").json()
    assert status["status"] == "Fechado"
    assert status["fechamento"]["saldoContado"] == 125.0
    assert status["movimentacao"]["saldoAtual"] == 130.0


def test_fechar_duas_vezes(client):
    client.post("/caixa/abrir", json={"valorInicial": 20.0})
    assert client.post("/caixa/fechar", json={"saldoContado": 20.0}).status_code == 201

    resposta = client.post("/caixa/fechar", json={"saldoContado": 20.0})

    assert resposta.status_code == 400
    assert resposta.json()["detail"] == "Caixa já foi fechado hoje"
    assert client.get("/caixa/relatorio").json()["quantidade"] == 1


def test_movimentos_depois_do_fechamento(client):
    client.post("/caixa/fechar", json={"saldoContado": 0})

    assert client.post("/caixa/sangria", json={"valor": 5.0, "motivo": "x"}).status_code == 400
    assert client.post("/caixa/abrir", json={"valorInicial": 5.0}).status_code == 400


def test_saldo_contado_negativo(client):
    resposta = client.post("/caixa/fechar", json={"saldoContado": -1})

    assert resposta.status_code == 400


def test_relatorio_de_fechamentos(client):
    client.post("/caixa/abrir", json={"valorInicial": 50.0})
    client.post("/caixa/fechar", json={"saldoContado": 52.0})

    relatorio = client.get("/caixa/relatorio").json()["relatorio"]

    assert len(relatorio) == 1
    assert relatorio[0]["valorAbertura"] == 50.0
    assert relatorio[0]["saldoEsperado"] == 50.0
    assert relatorio[0]["diferenca"] == 2.0


def test_caixa_isolado_por_tenant(client):
    client.post("/caixa/abrir", json={"valorInicial": 50.0})

    outro = client.get("/caixa/status", headers={"X-Tenant-Id": "salao-porto"}).json()

    assert outro["abertura"] is None
    assert outro["movimentacao"]["saldoAtual"] == 0.0
    assert client.post("/caixa/abrir", json={"valorInicial": 5.0},
                       headers={"X-Tenant-Id": "salao-porto"}).status_code == 201


def test_movimentos_de_caixa_aparecem_quitados(client):
    abertura = client.post("/caixa/abrir", json={"valorInicial": 50.0}).json()["abertura"]
    sangria = client.post("/caixa/sangria", json={"valor": 12.5, "motivo": "Táxi"}).json()["sangria"]

    for transacao_id in (abertura["id"], sangria["id"]):
        lancamento = client.get(f"/transacoes/{transacao_id}").json()
        assert lancamento["statusPagamento"] == "Pago"
        assert lancamento["valorPago"] == lancamento["valorFinal"]
        assert lancamento["valorPendente"] == 0.0
        assert lancamento["pagamentos"] == []
