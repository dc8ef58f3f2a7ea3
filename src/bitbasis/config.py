from decimal import Decimal

from pydantic_settings import BaseSettings

from bitbasis.domain.enums.tax import TaxMethod


class Settings(BaseSettings):
    db_host: str = "localhost"
    db_port: int = 54377
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_name: str = "bitbasis"
    coingecko_api_key: str = ""
    debug: bool = True
    coingecko_rate_per_second: float = 0.5
    default_tax_method: TaxMethod = TaxMethod.FIFO
    short_term_rate: Decimal = Decimal("0.35")
    long_term_rate: Decimal = Decimal("0.15")
    include_loss_offset: bool = False

    @property
    def database_url(self) -> str:
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    class Config:
        env_file = ".env"


settings = Settings()
