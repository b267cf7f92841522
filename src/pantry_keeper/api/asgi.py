"""ASGI entrypoint for the pantry keeper API."""

from pantry_keeper.api.app import create_app
from pantry_keeper.containers import build_container

app = create_app(build_container())
