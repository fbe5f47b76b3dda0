"""
Testes das regras de Transacao e Pagamento (sem banco)
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from financeiro.core.exceptions import ErroEstado, ErroValidacao
from financeiro.models import Pagamento, Transacao


def nova_transacao(**campos):
    dados = dict(
        tenant_id="t1",
        tipo="Receita",
        categoria="Serviço Avulso",
        valor=100.0,
        desconto=0.0,
        descricao="Limpeza de pele",
        status_pagamento="Pendente",
        parcelado=False,
        numero_parcelas=1,
        parcela_atual=1,
        comissao_percentual=0.0,
        comissao_valor=0.0,
    )
    dados.update(campos)
    transacao = Transacao(**dados)
    transacao.recalcular()
    return transacao


def novo_pagamento(**campos):
    dados = dict(tenant_id="t1", valor=10.0, forma_pagamento="Dinheiro")
    dados.update(campos)
    return Pagamento(**dados)


class TestTransacao:

    def test_valor_final_e_comissao(self):
        transacao = nova_transacao(desconto=10.0, comissao_percentual=40.0)

        assert transacao.valor_final == 90.0
        assert transacao.comissao_valor == 36.0
        assert transacao.valor_pendente == 90.0

    def test_desconto_maior_que_valor(self):
        with pytest.raises(ErroValidacao):
            nova_transacao(desconto=150.0)

    def test_categoria_de_outro_tipo(self):
        with pytest.raises(ErroValidacao, match="não é válida"):
            nova_transacao(tipo="Despesa", categoria="Pacote")

    def test_pagamento_parcial_depois_total(self):
        transacao = nova_transacao()

        transacao.registrar_pagamento(40.0, "MBWay")
        assert transacao.status_pagamento == "Parcial"
        assert transacao.data_pagamento is None

        transacao.registrar_pagamento(100.0, "Dinheiro")
        assert transacao.status_pagamento == "Pago"
        assert transacao.forma_pagamento == "Dinheiro"
        assert transacao.data_pagamento is not None

        with pytest.raises(ErroEstado, match="já está paga"):
            transacao.registrar_pagamento(10.0, "Dinheiro")

    def test_pagamento_em_transacao_cancelada(self):
        transacao = nova_transacao()
        transacao.cancelar("erro de lançamento")

        assert transacao.status_pagamento == "Cancelado"
        with pytest.raises(ErroEstado, match="cancelada ou estornada"):
            transacao.registrar_pagamento(10.0, "Dinheiro")

    def test_cancelar_paga_vira_estorno(self):
        transacao = nova_transacao(observacoes="")
        transacao.registrar_pagamento(100.0, "Dinheiro")

        transacao.cancelar("cliente devolveu o produto")

        assert transacao.status_pagamento == "Estornado"
        assert "[Cancelado/Estornado] cliente devolveu o produto" in transacao.observacoes

    def test_valor_pago_soma_pagamentos(self):
        transacao = nova_transacao()
        transacao.pagamentos.append(novo_pagamento(valor=25.5))
        transacao.pagamentos.append(novo_pagamento(valor=14.5))

        assert transacao.valor_pago == 40.0
        assert transacao.valor_pendente == 60.0

    def test_transacao_paga_sem_pagamentos(self):
        transacao = nova_transacao(status_pagamento="Pago")

        assert transacao.total_pagamentos == 0.0
        assert transacao.valor_pago == transacao.valor_final
        assert transacao.valor_pendente == 0.0

    def test_reverter_pagamento(self):
        transacao = nova_transacao()
        pagamento = novo_pagamento(valor=100.0)
        transacao.pagamentos.append(pagamento)
        transacao.registrar_pagamento(100.0, "Dinheiro")

        transacao.pagamentos.remove(pagamento)
        transacao.reverter_pagamento()

        assert transacao.status_pagamento == "Pendente"
        assert transacao.data_pagamento is None

    def test_parcela_atual(self):
        transacao = nova_transacao(parcelado=True, numero_parcelas=4)
        transacao.pagamentos.append(novo_pagamento(valor=50.0))

        transacao.registrar_pagamento(50.0, "Dinheiro")

        assert transacao.valor_parcela == 25.0
        assert transacao.parcela_atual == 3


class TestPagamento:

    @pytest.mark.parametrize(
        "forma, mensagem",
        [
            ("MBWay", "Telefone MBWay é obrigatório"),
            ("Multibanco", "Referência Multibanco é obrigatória"),
            ("Cartão de Crédito", "Últimos 4 dígitos do cartão são obrigatórios"),
            ("Cartão de Débito", "Últimos 4 dígitos do cartão são obrigatórios"),
            ("Transferência Bancária", "IBAN da transferência é obrigatório"),
        ],
    )
    def test_dados_obrigatorios_por_forma(self, forma, mensagem):
        with pytest.raises(ErroValidacao, match=mensagem):
            novo_pagamento(forma_pagamento=forma).recalcular()

    def test_telefone_mbway_invalido(self):
        pagamento = novo_pagamento(forma_pagamento="MBWay", dados_mbway={"telefone": "812345678"})

        with pytest.raises(ErroValidacao, match="9xxxxxxxx"):
            pagamento.recalcular()

    def test_iban_normalizado(self):
        pagamento = novo_pagamento(
            forma_pagamento="Transferência Bancária",
            dados_transferencia={"iban": "pt50 0002 0123 1234 5678 9015 4"},
        )

        pagamento.recalcular()

        assert pagamento.dados_transferencia["iban"] == "PT50000201231234567890154"

    def test_dados_de_outra_forma_descartados(self):
        pagamento = novo_pagamento(
            forma_pagamento="Dinheiro",
            dados_cartao={"ultimos4Digitos": "1234"},
        )

        pagamento.recalcular()

        assert pagamento.dados_cartao is None

    def test_valor_zero(self):
        with pytest.raises(ErroValidacao, match="maior que zero"):
            novo_pagamento(valor=0).recalcular()

    def test_forma_invalida(self):
        with pytest.raises(ErroValidacao, match="inválida"):
            novo_pagamento(forma_pagamento="Cheque").recalcular()
