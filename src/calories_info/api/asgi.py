"""ASGI entrypoint for the calories info API."""

from calories_info.api.app import create_app
from calories_info.containers import build_container

app = create_app(build_container())
