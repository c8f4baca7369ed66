"""ASGI entrypoint: the NutriScan API configured from the environment."""

from nutriscan.api.app import create_app
from nutriscan.config import Settings
from nutriscan.containers import build_container

settings = Settings()
app = create_app(build_container(settings))
