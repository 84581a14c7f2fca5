"""Shared wiring for the CLI scripts: config, Firebase and services."""

from __future__ import annotations

from arta_backend.config import AppConfig, get_config
from arta_backend.database import FirebaseManager
from arta_backend.logger import get_logger
from arta_backend.services import ServiceContainer, create_services
from arta_backend.services.identity_directory import IdentityDirectory


def build_services() -> tuple[ServiceContainer, AppConfig]:
    config = get_config()
    firebase = FirebaseManager(config=config, logger=get_logger("database"))
    directory = IdentityDirectory(app=firebase.app, logger=get_logger("identity"))
    services = create_services(store=firebase.document_store, directory=directory, config=config)
    return services, config
