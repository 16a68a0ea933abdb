"""Configuration management for Represent using pydantic-settings."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BUNDLED_DATASET = Path(__file__).parent / "data" / "legislators-current.json"


class FederalSource(str, Enum):
    """Which federal roster source to consult first."""

    CONGRESS = "congress"  # Congress.gov first, dataset on miss
    FALLBACK = "fallback"  # Dataset only
    AUTO = "auto"  # Congress.gov when an API key is configured


class DistrictMatchPolicy(str, Enum):
    """How to pick a state legislator when no district matches exactly."""

    LENIENT = "lenient"  # First candidate in the chamber
    STRICT = "strict"  # No legislator for that chamber


class ServiceConfig(BaseModel):
    """Base configuration for an upstream HTTP service."""

    enabled: bool = True
    timeout: float = 15.0


class CensusConfig(ServiceConfig):
    """Configuration for Census Geocoder."""

    base_url: str = "https://geocoding.geo.census.gov/geocoder"
    benchmark: str = "Public_AR_Current"
    vintage: str = "Current_Current"
    layers: str = "all"


class GeocodioConfig(ServiceConfig):
    """Configuration for Geocodio API."""

    api_key: Optional[str] = None
    base_url: str = "https://api.geocod.io"
    api_version: str = "v1.9"
    fields: str = "cd,stateleg"


class GeocodeServicesConfig(BaseModel):
    """Container for all geocoding service configurations."""

    census: CensusConfig = Field(default_factory=CensusConfig)
    geocodio: GeocodioConfig = Field(default_factory=GeocodioConfig)


class CongressConfig(ServiceConfig):
    """Configuration for the Congress.gov member API."""

    api_key: Optional[str] = None
    base_url: str = "https://api.congress.gov/v3"
    photo_base_url: str = "https://theunitedstates.io/images/congress/225x275"
    page_limit: int = 250
    min_officials: int = 3  # 2 senators + 1 representative


class DatasetConfig(ServiceConfig):
    """Configuration for the congress-legislators fallback dataset."""

    mirrors: list[str] = Field(
        default_factory=lambda: [
            "https://cdn.jsdelivr.net/gh/unitedstates/congress-legislators@main/legislators-current.json",
            "https://raw.githubusercontent.com/unitedstates/congress-legislators/main/legislators-current.json",
            "https://raw.githubusercontent.com/unitedstates/congress-legislators/master/legislators-current.json",
            "https://unitedstates.io/congress-legislators/legislators-current.json",
            "https://theunitedstates.io/congress-legislators/legislators-current.json",
        ]
    )
    bundled_path: Path = DEFAULT_BUNDLED_DATASET
    min_records: int = 300
    user_agent: str = "represent-lookup"
    timeout: float = 20.0


class OpenStatesConfig(ServiceConfig):
    """Configuration for the Open States people.geo API."""

    api_key: Optional[str] = None
    base_url: str = "https://v3.openstates.org"
    district_match: DistrictMatchPolicy = DistrictMatchPolicy.LENIENT


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_prefix="REPRESENT_",
        env_file=".env",
        env_nested_delimiter="__",  # REPRESENT_OPEN_STATES__DISTRICT_MATCH
        extra="ignore",
        populate_by_name=True,
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_file: str = Field(
        default="logs/represent.log",
        description="Path to log file",
    )

    geocode_services: GeocodeServicesConfig = Field(default_factory=GeocodeServicesConfig)
    geocode_service: str = Field(
        default="census", description="Geocoding service used to locate addresses"
    )

    federal_source: FederalSource = Field(
        default=FederalSource.AUTO,
        description="Federal roster source: congress, fallback, or auto",
    )
    congress: CongressConfig = Field(default_factory=CongressConfig)
    dataset: DatasetConfig = Field(default_factory=DatasetConfig)
    open_states: OpenStatesConfig = Field(default_factory=OpenStatesConfig)

    # Bare keys as deployed alongside the original functions
    congress_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("REPRESENT_CONGRESS_API_KEY", "CONGRESS_API_KEY"),
        description="Congress.gov API key (overrides congress.api_key)",
    )
    openstates_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("REPRESENT_OPENSTATES_API_KEY", "OPENSTATES_API_KEY"),
        description="Open States API key (overrides open_states.api_key)",
    )

    federal_timeout: float = Field(
        default=45.0,
        description="Upper bound in seconds for the whole federal branch",
    )
    state_timeout: float = Field(
        default=15.0,
        description="Upper bound in seconds for the whole state branch",
    )

    def congress_key(self) -> Optional[str]:
        """Return the configured Congress.gov API key, if any."""
        key = self.congress_api_key or self.congress.api_key
        return key.strip() if key and key.strip() else None

    def open_states_key(self) -> Optional[str]:
        """Return the configured Open States API key, if any."""
        key = self.openstates_api_key or self.open_states.api_key
        return key.strip() if key and key.strip() else None

    def resolved_federal_source(self) -> FederalSource:
        """Collapse AUTO into a concrete source based on credentials."""
        if self.federal_source is FederalSource.AUTO:
            return FederalSource.CONGRESS if self.congress_key() else FederalSource.FALLBACK
        return self.federal_source


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
