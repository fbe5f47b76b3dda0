"""
Fixtures compartilhadas: banco SQLite em memória por teste e cliente HTTP
"""

import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from financeiro.db import get_db
from financeiro.main import app
from financeiro.models import Base

TENANT = "salao-lisboa"
OUTRO_TENANT = "salao-porto"


def _ativar_foreign_keys(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _ativar_foreign_keys)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def SessionTeste(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(SessionTeste):
    session = SessionTeste()
    yield session
    session.close()


@pytest.fixture
def client(SessionTeste):
    def override_get_db():
        session = SessionTeste()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app, headers={"X-Tenant-Id": TENANT})
    app.dependency_overrides.clear()


@pytest.fixture
def cliente(client):
    resposta = client.post("/clientes", json={"nome": "Ana Ferreira", "telefone": "912345678"})
    assert resposta.status_code == 201
    return resposta.json()


@pytest.fixture
def pacote(client):
    resposta = client.post(
        "/pacotes",
        json={"nome": "Drenagem Linfática", "categoria": "Corporal", "sessoes": 5, "valor": 100.0},
    )
    assert resposta.status_code == 201
    return resposta.json()


@pytest.fixture
def vender(client, cliente, pacote):
    """Vende o pacote de 5 sessões ao cliente; campos extras vão no corpo"""

    def _vender(**extras):
        corpo = {"clienteId": cliente["id"], "pacoteId": pacote["id"], **extras}
        resposta = client.post("/compras-pacotes", json=corpo)
        assert resposta.status_code == 201, resposta.text
        return resposta.json()

    return _vender


@pytest.fixture
def criar_transacao(client):
    def _criar(valor=100.0, tipo="Receita", categoria="Produto", **extras):
        corpo = {
            "tipo": tipo,
            "categoria": categoria,
            "descricao": f"{categoria} teste",
            "valor": valor,
            **extras,
        }
        resposta = client.post("/transacoes", json=corpo)
        assert resposta.status_code == 201, resposta.text
        return resposta.json()

    return _criar
