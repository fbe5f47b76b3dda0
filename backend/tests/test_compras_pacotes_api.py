"""
Testes da API de compras de pacotes
"""

import sys
from pathlib import Path
from datetime import datetime, timedelta

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import update

from financeiro.core.datas import agora
from financeiro.models import CompraPacote

OUTRO_TENANT = "salao-porto"


def agendar(client, cliente_id, compra_id):
    resposta = client.post(
        "/agendamentos",
        json={
            "clienteId": cliente_id,
            "compraPacoteId": compra_id,
            "dataHora": "2025-06-10T10:00:00",
            "profissionalId": "prof-1",
        },
    )
    assert resposta.status_code == 201, resposta.text
    return resposta.json()


def realizar(client, agendamento_id):
    return client.patch(f"/agendamentos/{agendamento_id}/status", json={"status": "Realizado"})


def vencer_ontem(db, compra_id):
    db.execute(
        update(CompraPacote)
        .where(CompraPacote.id == compra_id)
        .values(data_expiracao=agora() - timedelta(days=1))
    )
    db.commit()


def test_venda_com_entrada(vender):
    venda = vender(valorPago=20.0)
    compra = venda["compraPacote"]
    transacao = venda["transacao"]

    assert compra["sessoesContratadas"] == 5
    assert compra["sessoesRestantes"] == 5
    assert compra["valorTotal"] == 100.0
    assert compra["valorPago"] == 20.0
    assert compra["valorPendente"] == 80.0
    assert compra["status"] == "Ativo"

    assert transacao["categoria"] == "Pacote"
    assert transacao["descricao"] == "Venda de pacote: Drenagem Linfática - Ana Ferreira"
    assert transacao["statusPagamento"] == "Parcial"
    assert transacao["valorPago"] == 20.0
    assert transacao["formaPagamento"] == "Dinheiro"


def test_venda_valor_pago_maior_que_total(client, cliente, pacote):
    resposta = client.post(
        "/compras-pacotes",
        json={"clienteId": cliente["id"], "pacoteId": pacote["id"], "valorPago": 150.0},
    )

    assert resposta.status_code == 400


def test_venda_pacote_inexistente(client, cliente):
    resposta = client.post("/compras-pacotes", json={"clienteId": cliente["id"], "pacoteId": 999})

    assert resposta.status_code == 404
    assert resposta.json()["detail"] == "Pacote não encontrado"


def test_consumir_todas_as_sessoes(client, cliente, vender):
    compra = vender(valorPago=20.0)["compraPacote"]

    for _ in range(5):
        agendamento = agendar(client, cliente["id"], compra["id"])
        resposta = realizar(client, agendamento["id"])
        assert resposta.status_code == 200, resposta.text
        assert resposta.json()["valorCobrado"] == 20.0
        assert resposta.json()["statusPagamento"] == "Pago"

    compra = client.get(f"/compras-pacotes/{compra['id']}").json()
    assert compra["sessoesRestantes"] == 0
    assert compra["sessoesUsadas"] == 5
    assert compra["status"] == "Concluído"
    assert [h["numeroDaSessao"] for h in compra["historico"]] == [1, 2, 3, 4, 5]

    extra = agendar(client, cliente["id"], compra["id"])
    resposta = realizar(client, extra["id"])
    assert resposta.status_code == 400
    assert resposta.json()["detail"] == "Pacote não possui sessões restantes"
    assert client.get(f"/agendamentos/{extra['id']}").json()["status"] == "Agendado"


def test_pacote_expirado_falha_e_fica_expirado(client, db, cliente, vender):
    compra = vender(diasValidade=30)["compraPacote"]
    vencer_ontem(db, compra["id"])
    agendamento = agendar(client, cliente["id"], compra["id"])

    resposta = realizar(client, agendamento["id"])

    assert resposta.status_code == 400
    assert resposta.json()["detail"] == "Pacote expirado"
    compra = client.get(f"/compras-pacotes/{compra['id']}").json()
    assert compra["status"] == "Expirado"
    assert compra["sessoesRestantes"] == 5


def test_estender_prazo(client, vender):
    compra = vender(diasValidade=30)["compraPacote"]
    vencimento = datetime.fromisoformat(compra["dataExpiracao"])

    resposta = client.put(
        f"/compras-pacotes/{compra['id']}/estender-prazo",
        json={"dias": 10, "motivo": "Cliente viajou"},
        headers={"X-User-Id": "recepcao-1"},
    )

    assert resposta.status_code == 200, resposta.text
    estendida = resposta.json()
    assert datetime.fromisoformat(estendida["dataExpiracao"]) == vencimento + timedelta(days=10)
    assert len(estendida["extensoes"]) == 1
    assert datetime.fromisoformat(estendida["extensoes"][0]["dataAnterior"]) == vencimento
    assert estendida["extensoes"][0]["motivo"] == "Cliente viajou"
    assert estendida["extensoes"][0]["realizadoPor"] == "recepcao-1"


def test_estender_prazo_reativa_pacote_expirado(client, db, cliente, vender):
    compra = vender(diasValidade=30)["compraPacote"]
    vencer_ontem(db, compra["id"])
    agendamento = agendar(client, cliente["id"], compra["id"])
    assert realizar(client, agendamento["id"]).status_code == 400

    resposta = client.put(f"/compras-pacotes/{compra['id']}/estender-prazo", json={"dias": 15})

    assert resposta.status_code == 200
    assert resposta.json()["status"] == "Ativo"
    assert realizar(client, agendamento["id"]).status_code == 200


def test_estender_prazo_de_pacote_sem_validade(client, vender):
    compra = vender()["compraPacote"]
    assert compra["dataExpiracao"] is None
    antes = agora()

    resposta = client.put(f"/compras-pacotes/{compra['id']}/estender-prazo", json={"dias": 20})

    assert resposta.status_code == 200, resposta.text
    estendida = resposta.json()
    vencimento = datetime.fromisoformat(estendida["dataExpiracao"])
    assert antes + timedelta(days=20) <= vencimento <= agora() + timedelta(days=20)
    assert estendida["extensoes"][0]["dataAnterior"] is None


def test_estender_prazo_dias_invalidos(client, vender):
    compra = vender()["compraPacote"]

    resposta = client.put(f"/compras-pacotes/{compra['id']}/estender-prazo", json={"dias": 0})

    assert resposta.status_code == 400
    assert resposta.json()["detail"] == "Número de dias deve ser maior que zero"


def test_cancelar_compra(client, vender):
    venda = vender()
    compra = venda["compraPacote"]

    resposta = client.put(f"/compras-pacotes/{compra['id']}/cancelar", json={"motivo": "Desistiu"})

    assert resposta.status_code == 200
    cancelada = resposta.json()
    assert cancelada["status"] == "Cancelado"
    assert cancelada["eventos"][-1]["tipo"] == "cancelamento"
    assert cancelada["eventos"][-1]["motivo"] == "Desistiu"

    transacao = client.get(f"/transacoes/{venda['transacao']['id']}").json()
    assert transacao["statusPagamento"] == "Cancelado"

    repetido = client.put(f"/compras-pacotes/{compra['id']}/cancelar", json={"motivo": "de novo"})
    assert repetido.status_code == 400


def test_cancelar_compra_com_entrada_encerra_a_venda(client, vender):
    venda = vender(valorPago=20.0)
    assert venda["transacao"]["statusPagamento"] == "Parcial"

    resposta = client.put(f"/compras-pacotes/{venda['compraPacote']['id']}/cancelar", json={"motivo": "Mudou-se"})

    assert resposta.status_code == 200
    transacao = client.get(f"/transacoes/{venda['transacao']['id']}").json()
    assert transacao["statusPagamento"] == "Cancelado"
    assert client.get("/transacoes/pendentes").json() == []


def test_cancelar_compra_quitada_mantem_a_venda(client, vender):
    venda = vender(valorPago=100.0)

    client.put(f"/compras-pacotes/{venda['compraPacote']['id']}/cancelar", json={"motivo": "Desistiu"})

    transacao = client.get(f"/transacoes/{venda['transacao']['id']}").json()
    assert transacao["statusPagamento"] == "Pago"


def test_deletar_compra_desvincula_transacao(client, vender):
    venda = vender(valorPago=10.0)
    compra_id = venda["compraPacote"]["id"]

    resposta = client.delete(f"/compras-pacotes/{compra_id}")

    assert resposta.status_code == 200
    assert client.get(f"/compras-pacotes/{compra_id}").status_code == 404
    transacao = client.get(f"/transacoes/{venda['transacao']['id']}").json()
    assert transacao["compraPacoteId"] is None
    assert transacao["valorPago"] == 10.0


def test_listagem_alertas_e_estatisticas(client, cliente, vender):
    vender(diasValidade=3)
    compra = vender(valorPago=100.0)["compraPacote"]
    for _ in range(3):
        agendamento = agendar(client, cliente["id"], compra["id"])
        assert realizar(client, agendamento["id"]).status_code == 200

    lista = client.get("/compras-pacotes", params={"cliente": cliente["id"]}).json()
    assert lista["total"] == 2

    alertas = client.get("/compras-pacotes/alertas").json()
    assert len(alertas["expirando"]) == 1
    assert len(alertas["poucasSessoes"]) == 1
    assert alertas["poucasSessoes"][0]["sessoesRestantes"] == 2
    assert alertas["totalAlertas"] == 2

    poucas = client.get("/compras-pacotes", params={"poucasSessoes": True}).json()
    assert [c["id"] for c in poucas["compras"]] == [compra["id"]]

    estatisticas = client.get("/compras-pacotes/estatisticas").json()
    assert estatisticas["totais"]["quantidade"] == 2
    assert estatisticas["totais"]["valorTotal"] == 200.0
    assert estatisticas["totais"]["valorPago"] == 100.0
    assert estatisticas["totais"]["sessoesUsadas"] == 3
    assert estatisticas["totais"]["taxaUso"] == 30.0

    do_cliente = client.get(f"/compras-pacotes/cliente/{cliente['id']}").json()
    assert len(do_cliente) == 2


def test_isolamento_por_tenant(client, vender):
    compra = vender()["compraPacote"]

    resposta = client.get(f"/compras-pacotes/{compra['id']}", headers={"X-Tenant-Id": OUTRO_TENANT})

    assert resposta.status_code == 404
    assert client.get("/compras-pacotes", headers={"X-Tenant-Id": OUTRO_TENANT}).json()["total"] == 0


def test_tenant_obrigatorio(client):
    resposta = client.get("/compras-pacotes", headers={"X-Tenant-Id": ""})

    assert resposta.status_code == 400
