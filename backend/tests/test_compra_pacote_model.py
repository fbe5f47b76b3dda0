"""
Testes das regras da CompraPacote (sem banco)
"""

import sys
from pathlib import Path
from datetime import timedelta

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from financeiro.core.datas import agora
from financeiro.core.exceptions import ErroEstado, ErroValidacao
from financeiro.models import CompraPacote


def nova_compra(**campos):
    dados = dict(
        tenant_id="t1",
        cliente_id=1,
        pacote_id=1,
        sessoes_contratadas=3,
        sessoes_usadas=0,
        valor_total=90.0,
        valor_pago=0.0,
        parcelado=False,
        numero_parcelas=1,
        status="Ativo",
        data_compra=agora(),
    )
    dados.update(campos)
    compra = CompraPacote(**dados)
    compra.recalcular()
    return compra


def test_recalcular_deriva_restantes_e_pendente():
    compra = nova_compra(sessoes_usadas=1, valor_pago=30.0)

    assert compra.sessoes_restantes == 2
    assert compra.valor_pendente == 60.0


def test_recalcular_define_expiracao_pela_validade():
    compra = nova_compra(dias_validade=30)

    assert compra.data_expiracao == compra.data_compra + timedelta(days=30)


def test_usar_sessao_ate_concluir():
    compra = nova_compra()

    for _ in range(3):
        compra.usar_sessao(agendamento_id=None, valor_cobrado=30.0)

    assert compra.sessoes_usadas == 3
    assert compra.sessoes_restantes == 0
    assert compra.status == "Concluído"
    assert [uso.numero_da_sessao for uso in compra.historico] == [1, 2, 3]

    with pytest.raises(ErroEstado, match="não possui sessões restantes"):
        compra.usar_sessao(agendamento_id=None, valor_cobrado=30.0)


def test_recalcular_conclui_quando_nada_resta():
    compra = nova_compra(sessoes_usadas=3)

    assert compra.status == "Concluído"


def test_usar_sessao_em_pacote_cancelado():
    compra = nova_compra()
    compra.cancelar("desistência")

    with pytest.raises(ErroEstado, match=r"não está ativo \(status: Cancelado\)"):
        compra.usar_sessao(agendamento_id=None, valor_cobrado=30.0)


def test_usar_sessao_expirado_marca_status():
    compra = nova_compra()
    compra.data_expiracao = agora() - timedelta(days=1)

    with pytest.raises(ErroEstado, match="Pacote expirado"):
        compra.usar_sessao(agendamento_id=None, valor_cobrado=30.0)

    assert compra.status == "Expirado"
    assert compra.sessoes_usadas == 0


def test_estender_prazo_reativa_expirado():
    compra = nova_compra()
    vencimento = agora() - timedelta(days=1)
    compra.data_expiracao = vencimento
    compra.status = "Expirado"

    compra.estender_prazo(10, "viagem do cliente", "usuario-1")

    assert compra.status == "Ativo"
    assert compra.data_expiracao == vencimento + timedelta(days=10)
    assert len(compra.extensoes) == 1
    extensao = compra.extensoes[0]
    assert extensao.data_anterior == vencimento
    assert extensao.motivo == "viagem do cliente"
    assert extensao.realizado_por == "usuario-1"


def test_estender_prazo_sem_expiracao_conta_a_partir_de_agora():
    compra = nova_compra()
    assert compra.data_expiracao is None
    momento = agora()

    compra.estender_prazo(15, momento=momento)

    assert compra.data_expiracao == momento + timedelta(days=15)
    assert compra.extensoes[0].data_anterior is None
    assert compra.extensoes[0].nova_data == momento + timedelta(days=15)


def test_estender_prazo_sem_dias():
    compra = nova_compra()

    with pytest.raises(ErroValidacao, match="maior que zero"):
        compra.estender_prazo(0)


def test_registrar_pagamento_parcelado():
    compra = nova_compra(valor_total=100.0, parcelado=True, numero_parcelas=4)

    compra.registrar_pagamento(50.0)

    assert compra.valor_pago == 50.0
    assert compra.valor_pendente == 50.0
    assert compra.parcelas_pagas == 2

    compra.estornar_pagamento(30.0)
    assert compra.valor_pago == 20.0
    assert compra.parcelas_pagas == 0


def test_registrar_pagamento_invalido():
    compra = nova_compra()

    with pytest.raises(ErroValidacao):
        compra.registrar_pagamento(0)


def test_cancelar_registra_evento():
    compra = nova_compra()

    compra.cancelar("mudou de cidade", "usuario-2")

    assert compra.status == "Cancelado"
    assert len(compra.eventos) == 1
    assert compra.eventos[0].tipo == "cancelamento"
    assert compra.eventos[0].motivo == "mudou de cidade"
    assert compra.extensoes == []


def test_parcelas_fora_do_intervalo():
    with pytest.raises(ErroValidacao):
        nova_compra(parcelado=True, numero_parcelas=13)
