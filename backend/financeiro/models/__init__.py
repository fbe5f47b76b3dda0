"""
Modelos SQLAlchemy
"""

from financeiro.models.base import Base
from financeiro.models.cadastros import Cliente, Pacote
from financeiro.models.agendamento import Agendamento
from financeiro.models.caixa import SessaoCaixa
from financeiro.models.compra_pacote import CompraPacote, UsoSessao, EventoCompraPacote
from financeiro.models.pagamento import Pagamento
from financeiro.models.transacao import Transacao
from financeiro.models import eventos  # noqa: F401

__all__ = [
    "Base",
    "Cliente",
    "Pacote",
    "Agendamento",
    "SessaoCaixa",
    "CompraPacote",
    "UsoSessao",
    "EventoCompraPacote",
    "Pagamento",
    "Transacao",
]
