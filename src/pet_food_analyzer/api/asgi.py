"""ASGI entrypoint for the pet food analyzer API."""

from pet_food_analyzer.api.app import create_app
from pet_food_analyzer.containers import build_container

app = create_app(build_container())
