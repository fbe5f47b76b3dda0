"""
Testes das conversões de fuso horário (Europe/Lisbon)
"""

import sys
from pathlib import Path
from datetime import date, datetime, timezone, timedelta

sys.path.insert(0, str(Path(__file__).parent.parent))

from financeiro.core.datas import (
    dia_local,
    formatar_euro,
    formatar_hora,
    limites_do_dia,
    limites_do_periodo,
    para_utc,
)


def test_limites_do_dia_no_verao():
    inicio, fim = limites_do_dia(date(2025, 7, 15))

    assert inicio == datetime(2025, 7, 14, 23, 0)
    assert fim == datetime(2025, 7, 15, 23, 0)


def test_limites_do_dia_no_inverno():
    inicio, fim = limites_do_dia(date(2025, 1, 15))

    assert inicio == datetime(2025, 1, 15, 0, 0)
    assert fim == datetime(2025, 1, 16, 0, 0)


def test_dia_da_mudanca_de_hora_tem_23_horas():
    inicio, fim = limites_do_dia(date(2025, 3, 30))

    assert fim - inicio == timedelta(hours=23)


def test_limites_do_periodo():
    inicio, fim = limites_do_periodo(date(2025, 6, 1), date(2025, 6, 30))

    assert inicio == datetime(2025, 5, 31, 23, 0)
    assert fim == datetime(2025, 6, 30, 23, 0)


def test_para_utc_sem_fuso_usa_lisboa():
    assert para_utc(datetime(2025, 7, 15, 10, 0)) == datetime(2025, 7, 15, 9, 0)


def test_para_utc_com_fuso():
    valor = datetime(2025, 7, 15, 10, 0, tzinfo=timezone(timedelta(hours=-3)))

    assert para_utc(valor) == datetime(2025, 7, 15, 13, 0)


def test_pagamento_tarde_da_noite_conta_no_dia_local():
    # 23:30 UTC de 15/07 já é 16/07 em Lisboa
    assert dia_local(datetime(2025, 7, 15, 23, 30)) == date(2025, 7, 16)
    assert formatar_hora(datetime(2025, 7, 15, 23, 30)) == "00:30"


def test_formatar_euro():
    assert formatar_euro(130) == "€130.00"
    assert formatar_euro(-5) == "€-5.00"
