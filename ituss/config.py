"""iTuss Broker Configuration."""

import secrets
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    server_name: str = "iTuss Broker"
    host: str = "0.0.0.0"
    port: int = 4000
    debug: bool = False
    log_level: str = "INFO"

    # Paths
    data_dir: Path = Path.home() / "ituss" / "data"

    # Credential store: 'sqlite' | 'json' | 'memory'
    store_backend: str = "sqlite"
    db_path: Path = Path.home() / "ituss" / "data" / "ituss.db"
    accounts_file: Path = Path.home() / "ituss" / "data" / "db.json"

    # Identity tokens (JWT)
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    identity_token_expire_days: int = 7

    # Password hashing
    bcrypt_rounds: int = 10

    # LiveKit (media-session provider)
    livekit_url: str = ""
    livekit_api_key: str = ""
    livekit_api_secret: str = ""
    media_token_ttl_minutes: int = 60
    room_prefix: str = "room-"

    # Simplified (non-WebRTC) viewer
    stream_url_template: str = "https://interactive-examples.mdn.mozilla.net/media/cc0-videos/flower.mp4"

    model_config = {"env_prefix": "ITUSS_"}

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        for d in [self.data_dir, self.db_path.parent, self.accounts_file.parent]:
            d.mkdir(parents=True, exist_ok=True)

    def ensure_secrets(self) -> None:
        """Generate the JWT secret if not set, persist it so tokens survive restarts."""
        secrets_file = self.data_dir / ".secrets"
        saved = {}
        if secrets_file.exists():
            for line in secrets_file.read_text().strip().splitlines():
                if "=" in line:
                    k, v = line.split("=", 1)
                    saved[k.strip()] = v.strip()

        if self.jwt_secret:
            return

        self.jwt_secret = saved.get("jwt_secret", "") or secrets.token_urlsafe(32)
        secrets_file.write_text(f"jwt_secret={self.jwt_secret}\n")
        secrets_file.chmod(0o600)


settings = Settings()
settings.ensure_dirs()
settings.ensure_secrets()
