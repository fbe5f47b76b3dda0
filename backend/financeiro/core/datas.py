"""
Datas e fuso horário do salão

Timestamps são gravados em UTC sem tzinfo; o "dia" do caixa e dos
relatórios é sempre o dia civil no fuso configurado (Europe/Lisbon).
"""

from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

import pytz

from financeiro.core.config import settings


def fuso():
    return pytz.timezone(settings.timezone)


def agora() -> datetime:
    """Instante atual em UTC (naive)"""
    return datetime.now(pytz.utc).replace(tzinfo=None)


def para_utc(valor: datetime) -> datetime:
    """Converte um datetime recebido da API para UTC naive.

    Valores sem tzinfo são interpretados no fuso do salão.
    """
    if valor.tzinfo is None:
        valor = fuso().localize(valor)
    return valor.astimezone(pytz.utc).replace(tzinfo=None)


def para_local(valor: datetime) -> datetime:
    return pytz.utc.localize(valor).astimezone(fuso())


def hoje() -> date:
    """Dia civil atual no fuso do salão"""
    return para_local(agora()).date()


def dia_local(valor: datetime) -> date:
    return para_local(valor).date()


def limites_do_dia(dia: Optional[date] = None) -> Tuple[datetime, datetime]:
    """Início (inclusivo) e fim (exclusivo) do dia local, em UTC naive"""
    dia = dia or hoje()
    inicio = fuso().localize(datetime.combine(dia, time.min))
    fim = fuso().localize(datetime.combine(dia + timedelta(days=1), time.min))
    return (
        inicio.astimezone(pytz.utc).replace(tzinfo=None),
        fim.astimezone(pytz.utc).replace(tzinfo=None),
    )


def limites_do_periodo(inicio: date, fim: date) -> Tuple[datetime, datetime]:
    return limites_do_dia(inicio)[0], limites_do_dia(fim)[1]


def formatar_data(dia: date) -> str:
    return dia.strftime("%d/%m/%Y")


def formatar_hora(valor: datetime) -> str:
    return para_local(valor).strftime("%H:%M")


def formatar_euro(valor: float) -> str:
    return f"€{valor:.2f}"
