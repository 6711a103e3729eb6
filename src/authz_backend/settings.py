import os
import threading

_ASSETS_DIR = os.path.join(os.path.dirname(__file__), "assets")

def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ["true", "1", "yes", "on"]

class BackendSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.DEBUG_MODE = os.environ.get("DEBUG_MODE","development")
        self.LOG_LEVEL = os.environ.get("LOG_LEVEL","INFO")

        # Database settings
        self.POSTGRES_URL = os.environ.get("POSTGRES_URL","localhost:5432")
        self.POSTGRES_USER = os.environ.get("POSTGRES_USER","postgres")
        self.POSTGRES_PASSWORD = os.environ.get("POSTGRES_PASSWORD","postgres")
        self.POSTGRES_DB = os.environ.get("POSTGRES_DB","authz")
        self.DATABASE_URL = os.environ.get(
            "DATABASE_URL",
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_URL}/{self.POSTGRES_DB}"
        )
        self.AUTO_CREATE_SCHEMA = _flag("AUTO_CREATE_SCHEMA", "false" if self.DEBUG_MODE == "production" else "true")

        # Authentication settings
        self.AUTH_SECRET = os.environ.get("AUTH_SECRET","development-secret")
        self.AUTH_ALGORITHM = os.environ.get("AUTH_ALGORITHM","HS256")
        self.AUTH_TOKEN_TTL = int(os.environ.get("AUTH_TOKEN_TTL","3600"))

        # Listing defaults
        self.DEFAULT_PAGE_SIZE = int(os.environ.get("DEFAULT_PAGE_SIZE","200"))
        self.MAX_PAGE_SIZE = int(os.environ.get("MAX_PAGE_SIZE","1000"))

        # Permission configuration files
        self.ROUTE_PERMISSIONS_CONFIG = os.environ.get("ROUTE_PERMISSIONS_CONFIG", os.path.join(_ASSETS_DIR, "route_permissions.yaml"))
        self.SEED_CONFIG = os.environ.get("SEED_CONFIG", os.path.join(_ASSETS_DIR, "seed.yaml"))

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(BackendSettings, cls).__new__(cls)
        return cls._instance

settings = BackendSettings()
