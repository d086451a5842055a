# === MODULE PURPOSE ===
# Data Platform service endpoints used by the clients.

from dataclasses import dataclass

from dp_esg.common.config import PlatformSettings


@dataclass(frozen=True)
class DPEndpoints:
    """Host and paths of the token and ESG universe services."""

    server: str = "api.refinitiv.com"
    token_path: str = "auth/oauth2/v1/token"
    universe_path: str = "data/environmental-social-governance/v1/universe"

    @classmethod
    def from_settings(cls, settings: PlatformSettings) -> "DPEndpoints":
        return cls(
            server=settings.server,
            token_path=settings.token_path,
            universe_path=settings.universe_path,
        )

    @property
    def token_url(self) -> str:
        return f"https://{self.server}/{self.token_path.lstrip('/')}"

    @property
    def universe_url(self) -> str:
        return f"https://{self.server}/{self.universe_path.lstrip('/')}"
