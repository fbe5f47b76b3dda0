"""
Financeiro do Salão - pacotes, transações, pagamentos e caixa
API principal FastAPI
"""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from financeiro.core.config import settings
from financeiro.core.exceptions import ErroFinanceiro
from financeiro.db import init_db
from financeiro.api.routes_compras_pacotes import router as compras_pacotes_router
from financeiro.api.routes_transacoes import router as transacoes_router
from financeiro.api.routes_pagamentos import router as pagamentos_router
from financeiro.api.routes_caixa import router as caixa_router
from financeiro.api.routes_cadastros import (
    agendamentos_router,
    clientes_router,
    pacotes_router,
)

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Financeiro do Salão",
    description="Pacotes de sessões, livro de transações, pagamentos e caixa diário",
    version="1.0.0",
    redirect_slashes=False  # Evita redirect 307 de /transacoes para /transacoes/
)

# CORS - DEVE estar antes de include_router
cors_origins_str = os.getenv("CORS_ORIGINS") or settings.cors_origins
cors_origins = [origin.strip() for origin in cors_origins_str.split(",") if origin.strip()]
logger.info(f"CORS origins list: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# Inicializa banco de dados na startup
@app.on_event("startup")
async def on_startup():
    """Inicializa banco de dados na startup"""
    init_db()


@app.exception_handler(ErroFinanceiro)
async def erro_financeiro_handler(request: Request, exc: ErroFinanceiro):
    """Regra de negócio violada: 400 (ou 404 para registro inexistente)"""
    logger.info(f"{request.method} {request.url.path} recusado: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def erro_inesperado_handler(request: Request, exc: Exception):
    logger.exception(f"Erro inesperado em {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Erro interno do servidor"})


# Rotas
app.include_router(compras_pacotes_router)
app.include_router(transacoes_router)
app.include_router(pagamentos_router)
app.include_router(caixa_router)
app.include_router(clientes_router)
app.include_router(pacotes_router)
app.include_router(agendamentos_router)


@app.get("/health")
async def health_check():
    """Endpoint de saúde da API"""
    return {
        "status": "ok",
        "service": "Financeiro do Salão",
        "version": "1.0.0",
        "environment": settings.environment
    }


@app.get("/")
async def root():
    """Endpoint raiz"""
    return {
        "message": "Financeiro do Salão",
        "docs": "/docs",
        "endpoints": {
            "compras-pacotes": "/compras-pacotes",
            "transacoes": "/transacoes",
            "pagamentos": "/pagamentos",
            "caixa": "/caixa",
            "health": "/health"
        }
    }
