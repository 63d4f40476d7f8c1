from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Any, List


class Settings(BaseSettings):
    # Database
    DB_USER: str = "user"
    DB_PASSWORD: str = "password"
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "launchpad"
    DATABASE_URL: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> Any:
        if isinstance(v, str):
            return v
        values = info.data
        return (
            f"postgresql+psycopg2://{values.get('DB_USER')}:{values.get('DB_PASSWORD')}@"
            f"{values.get('DB_HOST')}:{values.get('DB_PORT')}/{values.get('DB_NAME')}"
        )

    DB_POOL_SIZE: int = 5

    # Chain (Base mainnet)
    RPC_URL: str = "https://mainnet.base.org"
    CHAIN_ID: int = 8453
    PLATFORM_PRIVATE_KEY: Optional[str] = None
    PLATFORM_WALLET: str = "0x0000000000000000000000000000000000000000"
    PAIRED_TOKEN_ADDRESS: str = "0x4200000000000000000000000000000000000006"  # WETH on Base
    FEE_LOCKER_ADDRESS: str = "0xF3622742b1E446D92e45E22923Ef11C2fcD55D68"
    IDENTITY_REGISTRY_ADDRESS: str = "0x0000000000000000000000000000000000000000"
    TX_RECEIPT_TIMEOUT: int = 120

    # Deploy service
    DEPLOY_SERVICE_URL: str = "http://localhost:8090/v1/deploy"
    DEPLOY_TIMEOUT: int = 300
    DEPLOY_POLL_INTERVAL: float = 3.0

    # Launch policy
    PLATFORM_FEE_BPS: int = 2000
    DEFAULT_TRADING_FEE_BPS: int = 100
    LAUNCH_COOLDOWN_HOURS: int = 24
    PLATFORM_NAME: str = "Launchpad"

    # Fee aggregation
    FEE_CACHE_TTL: int = 300
    FEE_BATCH_SIZE: int = 5
    FEE_SANITY_CEILING: str = "10"

    # Auto-claim daemon
    AUTO_CLAIM_ENABLED: bool = True
    AUTO_CLAIM_INITIAL_DELAY: int = 300  # let the server settle before the first run
    AUTO_CLAIM_INTERVAL: int = 86400

    # Monitoring
    LOG_LEVEL: str = "INFO"

    # Error handling
    MAX_RETRIES: int = 3
    RETRY_DELAY: int = 5

    # API
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8083
    API_KEY: Optional[str] = None
    CORS_ORIGINS: List[str] = ["*"]

    SERVICE_VERSION: str = "1.0.0"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
