from fastapi import Request

from tikky.core.config import Settings, get_settings
from tikky.services.counter_store import CounterStore


def get_store(request: Request) -> CounterStore:
    return request.app.state.store


def get_app_settings() -> Settings:
    return get_settings()
