"""ASGI entrypoint for the profile client shell."""

from ums_client.api.app import create_app
from ums_client.containers import build_container

app = create_app(build_container())
