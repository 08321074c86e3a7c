"""
FastAPI dependencies.

Upstream services are built once in create_app() and kept on app.state;
routes get them through these functions so tests can swap the whole
wiring by building their own app.
"""

from fastapi import Request

from norgesglass.services.narvesen import NarvesenStoreDirectory
from norgesglass.services.ngu import NGUGeologyClient
from norgesglass.services.nve import NVEHydrologyClient


def get_store_directory(request: Request) -> NarvesenStoreDirectory:
    return request.app.state.store_directory


def get_geology_client(request: Request) -> NGUGeologyClient:
    return request.app.state.geology_client


def get_hydrology_client(request: Request) -> NVEHydrologyClient:
    return request.app.state.hydrology_client
