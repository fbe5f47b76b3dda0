"""
Base declarativa SQLAlchemy
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def arredondar(valor) -> float:
    """Arredonda valores monetários (EUR) para cêntimos"""
    return round(float(valor or 0), 2)
