import os
import ssl
from typing import Optional, Union

from dotenv import load_dotenv

load_dotenv()

SSL_MODES = ("disable", "require", "verify-ca", "verify-full")


def _positive_ms(key: str, default: int) -> int:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value <= 0:
        raise ValueError(f"{key} must be a positive integer (milliseconds), got {raw!r}")
    return value


def _int_at_least(key: str, default: int, minimum: int) -> int:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        value = minimum - 1
    if value < minimum:
        raise ValueError(f"{key} must be an integer >= {minimum}, got {raw!r}")
    return value


def _async_database_url(url: str) -> str:
    """Point plain postgres URLs at the asyncpg driver."""
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+asyncpg://" + url[len(prefix):]
    return url


def _ssl_ca_cert() -> Optional[str]:
    # Inline PEM wins over the file mount
    cert = os.getenv("DB_SSL_CA_CERT", "")
    if cert:
        return cert
    path = os.getenv("DB_SSL_CA_CERT_FILE", "")
    if path:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    return None


class Settings:
    def __init__(self):
        database_url = os.getenv("DATABASE_URL")
        # DB_SSL_MODE only applies to the URL built from DB_* parts
        ssl_mode = "disable"
        if not database_url:
            ssl_mode = os.getenv("DB_SSL_MODE", "disable").strip().lower() or "disable"
            if ssl_mode not in SSL_MODES:
                raise ValueError(f"DB_SSL_MODE must be one of {', '.join(SSL_MODES)}, got {ssl_mode!r}")
            database_url = "postgresql://{user}:{password}@{host}:{port}/{name}".format(
                user=os.getenv("DB_USER", "postgres"),
                password=os.getenv("DB_PASSWORD", "postgres"),
                host=os.getenv("DB_HOST", "localhost"),
                port=os.getenv("DB_PORT", "5432"),
                name=os.getenv("DB_NAME", "foodinventory"),
            )
        self.database_url: str = _async_database_url(database_url)
        self.database_echo: bool = os.getenv("DATABASE_ECHO", "False").lower() == "true"
        self.db_ssl_mode: str = ssl_mode
        self.db_ssl_ca_cert: Optional[str] = _ssl_ca_cert()

        # Open Food Facts settings
        self.product_lookup_timeout_ms: int = _positive_ms("PRODUCT_LOOKUP_TIMEOUT_MS", 500)
        self.catalog_base_url: str = os.getenv(
            "CATALOG_BASE_URL", "https://world.openfoodfacts.org"
        ).rstrip("/")
        self.catalog_user_agent: str = os.getenv(
            "CATALOG_USER_AGENT", "FoodInventory/1.0 (home warehouse tool)"
        )

        self.request_timeout_ms: int = _positive_ms("REQUEST_TIMEOUT_MS", 5000)

        self.default_low_stock_threshold: int = _int_at_least("DEFAULT_LOW_STOCK_THRESHOLD", 1, 0)

        self.port: int = _int_at_least("PORT", 8080, 1)

    @property
    def product_lookup_timeout(self) -> float:
        return self.product_lookup_timeout_ms / 1000.0

    @property
    def request_timeout(self) -> float:
        return self.request_timeout_ms / 1000.0

    def ssl_context(self) -> Optional[ssl.SSLContext]:
        """SSL context trusting DB_SSL_CA_CERT, or None to use the driver defaults."""
        if not self.db_ssl_ca_cert:
            return None
        try:
            return ssl.create_default_context(cadata=self.db_ssl_ca_cert)
        except (ssl.SSLError, ValueError) as e:
            raise ValueError(f"DB_SSL_CA_CERT: no valid PEM certificate found ({e})") from e

    def connect_ssl(self) -> Union[None, str, ssl.SSLContext]:
        """
        Value for asyncpg's ``ssl`` connect argument, or None for plaintext.

        A CA certificate always turns TLS on and is used to verify the server.
        ``require`` without a CA encrypts but does not verify. ``verify-ca``
        checks the chain only, ``verify-full`` checks the host name as well.
        """
        mode = self.db_ssl_mode
        if mode == "disable" and not self.db_ssl_ca_cert:
            return None
        if mode == "require" and not self.db_ssl_ca_cert:
            return "require"
        ctx = self.ssl_context() or ssl.create_default_context()
        if mode in ("require", "verify-ca"):
            ctx.check_hostname = False
        return ctx


settings = Settings()
