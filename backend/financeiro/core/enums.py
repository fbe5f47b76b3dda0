"""
Valores fechados do domínio financeiro
"""

import enum


class TipoTransacao(str, enum.Enum):
    RECEITA = "Receita"
    DESPESA = "Despesa"


class CategoriaTransacao(str, enum.Enum):
    # Receitas
    SERVICO_AVULSO = "Serviço Avulso"
    PACOTE = "Pacote"
    PRODUTO = "Produto"
    # Despesas
    FORNECEDOR = "Fornecedor"
    SALARIO = "Salário"
    COMISSAO = "Comissão"
    ALUGUEL = "Aluguel"
    AGUA_LUZ = "Água/Luz"
    INTERNET = "Internet"
    PRODUTOS = "Produtos"
    MARKETING = "Marketing"
    # Ambos
    OUTROS = "Outros"


CATEGORIAS_POR_TIPO = {
    TipoTransacao.RECEITA: {
        CategoriaTransacao.SERVICO_AVULSO,
        CategoriaTransacao.PACOTE,
        CategoriaTransacao.PRODUTO,
        CategoriaTransacao.OUTROS,
    },
    TipoTransacao.DESPESA: {
        CategoriaTransacao.FORNECEDOR,
        CategoriaTransacao.SALARIO,
        CategoriaTransacao.COMISSAO,
        CategoriaTransacao.ALUGUEL,
        CategoriaTransacao.AGUA_LUZ,
        CategoriaTransacao.INTERNET,
        CategoriaTransacao.PRODUTOS,
        CategoriaTransacao.MARKETING,
        CategoriaTransacao.OUTROS,
    },
}


class StatusPagamento(str, enum.Enum):
    PENDENTE = "Pendente"
    PAGO = "Pago"
    PARCIAL = "Parcial"
    CANCELADO = "Cancelado"
    ESTORNADO = "Estornado"


class FormaPagamento(str, enum.Enum):
    DINHEIRO = "Dinheiro"
    MBWAY = "MBWay"
    MULTIBANCO = "Multibanco"
    CARTAO_DEBITO = "Cartão de Débito"
    CARTAO_CREDITO = "Cartão de Crédito"
    TRANSFERENCIA = "Transferência Bancária"


# A transação aceita também "Múltiplas"; o pagamento individual nunca.
FORMAS_TRANSACAO = [f.value for f in FormaPagamento] + ["Múltiplas"]


class BandeiraCartao(str, enum.Enum):
    VISA = "Visa"
    MASTERCARD = "Mastercard"
    AMEX = "American Express"
    MAESTRO = "Maestro"
    OUTRO = "Outro"


class EstadoMBWay(str, enum.Enum):
    PENDENTE = "Pendente"
    PAGO = "Pago"
    EXPIRADO = "Expirado"
    CANCELADO = "Cancelado"


class StatusCompraPacote(str, enum.Enum):
    ATIVO = "Ativo"
    CONCLUIDO = "Concluído"
    CANCELADO = "Cancelado"
    EXPIRADO = "Expirado"


class TipoEventoCompra(str, enum.Enum):
    EXTENSAO = "extensao"
    CANCELAMENTO = "cancelamento"


class MovimentoCaixa(str, enum.Enum):
    ABERTURA = "abertura"
    SANGRIA = "sangria"
    SUPRIMENTO = "suprimento"
    FECHAMENTO = "fechamento"


class StatusAgendamento(str, enum.Enum):
    AGENDADO = "Agendado"
    CONFIRMADO = "Confirmado"
    REALIZADO = "Realizado"
    CANCELADO_CLIENTE = "Cancelado Pelo Cliente"
    CANCELADO_SALAO = "Cancelado Pelo Salão"
    NAO_COMPARECEU = "Não Compareceu"
