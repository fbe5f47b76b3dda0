"""
Modelo SQLAlchemy de pagamento (movimento de dinheiro de uma transação)
"""

import re

from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey, Text, JSON, Index
from sqlalchemy.orm import relationship

from financeiro.core.datas import agora
from financeiro.core.enums import FormaPagamento
from financeiro.core.exceptions import ErroValidacao
from financeiro.models.base import Base


TELEFONE_MBWAY = re.compile(r"^9[0-9]{8}$")
ENTIDADE_MULTIBANCO = re.compile(r"^[0-9]{5}$")
REFERENCIA_MULTIBANCO = re.compile(r"^[0-9]{9}$")
ULTIMOS_4_DIGITOS = re.compile(r"^[0-9]{4}$")
IBAN_PT = re.compile(r"^PT50[0-9]{21}$")

# Campo de dados exigido por cada forma de pagamento
CAMPO_DADOS = {
    FormaPagamento.MBWAY.value: "dados_mbway",
    FormaPagamento.MULTIBANCO.value: "dados_multibanco",
    FormaPagamento.CARTAO_DEBITO.value: "dados_cartao",
    FormaPagamento.CARTAO_CREDITO.value: "dados_cartao",
    FormaPagamento.TRANSFERENCIA.value: "dados_transferencia",
}


class Pagamento(Base):
    """Pagamento registrado contra uma transação"""

    __tablename__ = "pagamentos"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    transacao_id = Column(Integer, ForeignKey("transacoes.id"), nullable=False, index=True)

    valor = Column(Float, nullable=False)
    forma_pagamento = Column(String(40), nullable=False)
    data_pagamento = Column(DateTime, default=agora, nullable=False)

    # Dados específicos da forma de pagamento (JSON)
    dados_mbway = Column(JSON, nullable=True)  # {"telefone", "referencia", "estado"}
    dados_multibanco = Column(JSON, nullable=True)  # {"entidade", "referencia", "valor", "dataLimite"}
    dados_cartao = Column(JSON, nullable=True)  # {"bandeira", "ultimos4Digitos", "parcelas", "nsu"}
    dados_transferencia = Column(JSON, nullable=True)  # {"banco", "iban", "referencia", "comprovante"}

    observacoes = Column(Text, default="", nullable=False)

    created_at = Column(DateTime, default=agora, nullable=False)

    transacao = relationship("Transacao", back_populates="pagamentos")

    __table_args__ = (
        Index("ix_pagamentos_tenant_data", "tenant_id", "data_pagamento"),
        Index("ix_pagamentos_tenant_forma", "tenant_id", "forma_pagamento"),
    )

    def recalcular(self):
        """Valida o pagamento; chamado antes de cada flush"""
        if self.valor is None or self.valor <= 0:
            raise ErroValidacao("Valor do pagamento deve ser maior que zero")

        try:
            forma = FormaPagamento(self.forma_pagamento)
        except ValueError:
            raise ErroValidacao(f"Forma de pagamento inválida: {self.forma_pagamento}")

        # Só os dados da forma escolhida são guardados
        campo_exigido = CAMPO_DADOS.get(forma.value)
        for campo in set(CAMPO_DADOS.values()):
            if campo != campo_exigido and getattr(self, campo) is not None:
                setattr(self, campo, None)

        if forma == FormaPagamento.MBWAY:
            telefone = (self.dados_mbway or {}).get("telefone")
            if not telefone:
                raise ErroValidacao("Telefone MBWay é obrigatório")
            if not TELEFONE_MBWAY.match(telefone):
                raise ErroValidacao("Telefone deve ter formato 9xxxxxxxx")

        elif forma == FormaPagamento.MULTIBANCO:
            dados = self.dados_multibanco or {}
            if not dados.get("referencia"):
                raise ErroValidacao("Referência Multibanco é obrigatória")
            if not REFERENCIA_MULTIBANCO.match(dados["referencia"]):
                raise ErroValidacao("Referência deve ter 9 dígitos")
            if dados.get("entidade") and not ENTIDADE_MULTIBANCO.match(dados["entidade"]):
                raise ErroValidacao("Entidade deve ter 5 dígitos")

        elif forma in (FormaPagamento.CARTAO_DEBITO, FormaPagamento.CARTAO_CREDITO):
            digitos = (self.dados_cartao or {}).get("ultimos4Digitos")
            if not digitos:
                raise ErroValidacao("Últimos 4 dígitos do cartão são obrigatórios")
            if not ULTIMOS_4_DIGITOS.match(digitos):
                raise ErroValidacao("Últimos 4 dígitos inválidos")

        elif forma == FormaPagamento.TRANSFERENCIA:
            iban = (self.dados_transferencia or {}).get("iban")
            if not iban:
                raise ErroValidacao("IBAN da transferência é obrigatório")
            iban = iban.replace(" ", "").upper()
            if not IBAN_PT.match(iban):
                raise ErroValidacao("IBAN português inválido")
            if iban != self.dados_transferencia["iban"]:
                self.dados_transferencia = {**self.dados_transferencia, "iban": iban}
