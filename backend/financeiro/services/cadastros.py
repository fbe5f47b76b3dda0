"""
Cadastro mínimo de clientes e pacotes usado pelo financeiro
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from financeiro.core.exceptions import ErroValidacao
from financeiro.models import Cliente, Pacote

logger = logging.getLogger(__name__)


def criar_cliente(db: Session, tenant_id: str, dados: dict) -> Cliente:
    if not (dados.get("nome") or "").strip():
        raise ErroValidacao("Nome do cliente é obrigatório")

    cliente = Cliente(
        tenant_id=tenant_id,
        nome=dados["nome"].strip(),
        telefone=dados.get("telefone"),
        email=dados.get("email"),
    )
    db.add(cliente)
    db.flush()
    return cliente


def listar_clientes(db: Session, tenant_id: str, nome: Optional[str] = None) -> List[Cliente]:
    query = db.query(Cliente).filter(Cliente.tenant_id == tenant_id)
    if nome:
        query = query.filter(Cliente.nome.ilike(f"%{nome}%"))
    return query.order_by(Cliente.nome).all()


def criar_pacote(db: Session, tenant_id: str, dados: dict) -> Pacote:
    if not dados.get("sessoes") or dados["sessoes"] < 1:
        raise ErroValidacao("Pacote deve ter pelo menos 1 sessão")
    if dados.get("valor") is None or dados["valor"] < 0:
        raise ErroValidacao("Valor do pacote não pode ser negativo")

    pacote = Pacote(
        tenant_id=tenant_id,
        nome=dados["nome"],
        categoria=dados["categoria"],
        sessoes=dados["sessoes"],
        valor=dados["valor"],
        descricao=dados.get("descricao"),
        ativo=dados.get("ativo", True),
    )
    db.add(pacote)
    db.flush()
    logger.info(f"Pacote {pacote.id} criado: {pacote.nome} ({pacote.sessoes} sessões, {pacote.valor})")
    return pacote


def listar_pacotes(db: Session, tenant_id: str, ativo: Optional[bool] = None) -> List[Pacote]:
    query = db.query(Pacote).filter(Pacote.tenant_id == tenant_id)
    if ativo is not None:
        query = query.filter(Pacote.ativo == ativo)
    return query.order_by(Pacote.nome).all()
