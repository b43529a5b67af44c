# config/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Tuple

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    # API
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Frameslot Template Service"

    # CORS
    ALLOWED_HOSTS: List[str] = ["*"]

    # Auth
    BASIC_AUTH_USERNAME: str = "admin"
    BASIC_AUTH_PASSWORD: str = "secret"

    # Env
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Worker pool / timeouts
    MAX_WORKERS: int = 4
    ENDPOINT_TIMEOUT_SECONDS: float = 55

    # Marker detection
    MARKER_COLORS: List[Tuple[int, int, int]] = [
        (255, 0, 255),   # #FF00FF
        (185, 82, 159),  # #B9529F, magenta after a CMYK round trip
    ]
    COLOR_TOLERANCE: int = 15
    MIN_ALPHA: int = 128
    MIN_HOLE_SIZE: int = 50
    NOISE_FLOOR: int = 8
    ROW_BAND: int = 20

    # Compound region split
    SPLIT_MIN_EXTENT: int = 100
    SPLIT_SAMPLE_STRIDE: int = 10
    SPLIT_BRIDGE_WIDTH: int = 9
    IRREGULAR_FILL_RATIO: float = 0.9

    # Classification
    CARD_ASPECT_MIN: float = 0.8
    CARD_ASPECT_MAX: float = 1.2

    # Pan / zoom
    TRANSFORM_MIN_SCALE: float = 0.1
    TRANSFORM_MAX_SCALE: float = 10.0

settings = Settings()
