"""
Banco de dados: engine, sessões e a dependency de sessão por requisição
"""

import logging
from fastapi import HTTPException
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import NullPool
from financeiro.core.config import settings
from financeiro.core.exceptions import ErroFinanceiro
from financeiro.models import Base

# O import de financeiro.models registra as tabelas e o listener before_flush

logger = logging.getLogger(__name__)


def _pragmas_sqlite(dbapi_conn, connection_record):
    """WAL para leituras concorrentes; chaves estrangeiras ligadas"""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def criar_engine(url: str):
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    # Uma conexão por sessão; o timeout espera o lock de escrita de outra requisição
    engine = create_engine(
        url,
        connect_args={"check_same_thread": False, "timeout": settings.sqlite_timeout},
        poolclass=NullPool,
    )
    event.listen(engine, "connect", _pragmas_sqlite)
    return engine


engine = criar_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """Cria as tabelas que ainda não existem"""
    Base.metadata.create_all(bind=engine)
    logger.info(f"Banco inicializado: {engine.url.render_as_string(hide_password=True)}")


def get_db() -> Session:
    """
    Sessão da requisição, para Depends(get_db).

    Uma requisição é uma transação: commit no fim, rollback em caso de erro,
    de modo que pagamento, transação e compra de pacote gravam juntos ou
    não gravam. Exceção: compras_pacotes.consumir_sessao faz commit ao
    marcar um pacote vencido como Expirado, antes de devolver o erro.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except (ErroFinanceiro, HTTPException):
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Erro na sessão do banco: {e}", exc_info=True)
        raise
    finally:
        db.close()
