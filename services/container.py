"""
Wires the core components together from one configuration object.

create_app() builds a single Services instance and keeps it in
app.extensions; request handlers reach it through current_services().
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from argon2 import PasswordHasher
from flask import current_app

from models.db_storage import DBStorage
from models.stores import SqlCredentialStore, SqlFileStore, SqlSessionStore
from services.files import FileRegistry
from services.sessions import SessionManager
from utils.payloads import LocalPayloadStorage
from utils.security import PasswordVerifier, TokenIssuer

EXTENSION_KEY = "file_vault"


@dataclass
class Services:
    storage: DBStorage
    tokens: TokenIssuer
    sessions: SessionManager
    files: FileRegistry
    payloads: LocalPayloadStorage


def build_services(config, storage: DBStorage) -> Services:
    tokens = TokenIssuer(
        secret=config.JWT_SECRET,
        algorithm=config.JWT_ALGORITHM,
        access_ttl=timedelta(seconds=config.ACCESS_TOKEN_EXPIRES_SECONDS),
        issuer=config.JWT_ISSUER,
    )
    hasher = PasswordHasher(
        time_cost=config.ARGON2_TIME_COST,
        memory_cost=config.ARGON2_MEMORY_COST,
        parallelism=config.ARGON2_PARALLELISM,
    )
    sessions = SessionManager(
        credentials=SqlCredentialStore(storage),
        sessions=SqlSessionStore(storage),
        passwords=PasswordVerifier(hasher),
        tokens=tokens,
        max_devices=config.MAX_DEVICES_PER_USER,
        refresh_ttl=timedelta(days=config.REFRESH_TOKEN_EXPIRES_DAYS),
    )
    payloads = LocalPayloadStorage(config.UPLOAD_FOLDER)
    files = FileRegistry(SqlFileStore(storage), payloads)
    return Services(storage=storage, tokens=tokens, sessions=sessions, files=files, payloads=payloads)


def current_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]
