"""ASGI entrypoint for the reframing API."""

from thought_reframer.api.app import create_app
from thought_reframer.containers import build_container

app = create_app(build_container())
