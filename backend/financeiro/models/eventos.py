"""
Recalculo dos campos derivados antes de cada flush

Toda escrita de Transacao, Pagamento ou CompraPacote passa por
`recalcular()`, qualquer que seja o caminho de código que a originou.
"""

from sqlalchemy import event
from sqlalchemy.orm import Session


@event.listens_for(Session, "before_flush")
def _recalcular_campos_derivados(session, flush_context, instances):
    for obj in list(session.new) + list(session.dirty):
        recalcular = getattr(obj, "recalcular", None)
        if recalcular is not None:
            recalcular()
