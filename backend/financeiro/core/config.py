"""
Configurações do financeiro (variáveis de ambiente ou .env)
"""

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configurações carregadas do .env"""

    environment: str = "development"
    debug: bool = True

    # Banco: SQLite local por padrão, PostgreSQL em produção
    database_url: str = "sqlite:///./data/financeiro.db"
    sqlite_timeout: float = 20.0

    # Origens do frontend, separadas por vírgula
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # O "dia" do caixa e dos relatórios é o dia civil neste fuso
    timezone: str = "Europe/Lisbon"

    # Alertas de pacotes
    dias_alerta_expiracao: int = 7
    limite_poucas_sessoes: int = 2

    limite_padrao: int = 50

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def usa_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def diretorio_sqlite(self) -> Path:
        """Diretório do arquivo SQLite (vazio para bancos em memória)"""
        _, _, caminho = self.database_url.partition("///")
        if not caminho or caminho == ":memory:":
            return Path()
        return Path(caminho).parent


settings = Settings()


def ensure_directories():
    """Cria o diretório do banco SQLite local se não existir"""
    if settings.usa_sqlite and settings.diretorio_sqlite != Path():
        settings.diretorio_sqlite.mkdir(parents=True, exist_ok=True)


ensure_directories()
