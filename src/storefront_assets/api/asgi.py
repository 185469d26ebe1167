"""ASGI entrypoint for the storefront assets API."""

from storefront_assets.api.app import create_app
from storefront_assets.containers import build_container

app = create_app(build_container())
