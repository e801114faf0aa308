"""ASGI entrypoint for the AllerWise API."""

from allerwise.api.app import create_app
from allerwise.containers import build_container

app = create_app(build_container())
