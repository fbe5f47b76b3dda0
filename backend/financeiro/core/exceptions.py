"""
Exceções de regra de negócio

Levantadas pelos modelos e serviços; o handler registrado em main.py
converte cada uma no status HTTP correspondente.
"""


class ErroFinanceiro(Exception):
    """Base de todos os erros de regra de negócio"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ErroValidacao(ErroFinanceiro):
    """Campo ausente ou inválido (valor <= 0, dados do método em falta...)"""


class ErroEstado(ErroFinanceiro):
    """Operação incompatível com o estado atual (pacote expirado, caixa já fechado...)"""


class NaoEncontrado(ErroFinanceiro):
    """Registro inexistente ou de outro tenant"""

    status_code = 404
