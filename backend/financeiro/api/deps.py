"""
Dependências comuns das rotas

O tenant e o usuário chegam em headers já validados pelo gateway de
autenticação.
"""

import math
from typing import Optional

from fastapi import Header, HTTPException


def get_tenant_id(x_tenant_id: Optional[str] = Header(None)) -> str:
    """Tenant da requisição (header X-Tenant-Id, obrigatório)"""
    if not x_tenant_id or not x_tenant_id.strip():
        raise HTTPException(status_code=400, detail="Header X-Tenant-Id é obrigatório")
    return x_tenant_id.strip()


def get_usuario_id(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    """Usuário que executa a ação (header X-User-Id, opcional)"""
    return x_user_id.strip() if x_user_id else None


def total_paginas(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 1
