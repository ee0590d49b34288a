"""Firebase app bootstrap from environment configuration."""

from __future__ import annotations

import logging
import os
from typing import Any

import firebase_admin
from firebase_admin import auth, credentials, db
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class FirebaseConfigError(Exception):
    """Raised when the Firebase app cannot be initialized."""


class FirebaseSettings(BaseModel):
    """Project configuration, supplied by the environment at process start."""

    project_id: str = ""
    database_url: str = ""
    credentials_path: str = ""
    storage_bucket: str = ""

    @classmethod
    def from_env(cls) -> FirebaseSettings:
        return cls(
            project_id=os.getenv("FIREBASE_PROJECT_ID", ""),
            database_url=os.getenv("FIREBASE_DATABASE_URL", ""),
            credentials_path=os.getenv("FIREBASE_CREDENTIALS", ""),
            storage_bucket=os.getenv("FIREBASE_STORAGE_BUCKET", ""),
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.project_id and self.database_url)

    def app_options(self) -> dict[str, str]:
        options = {"projectId": self.project_id, "databaseURL": self.database_url}
        if self.storage_bucket:
            options["storageBucket"] = self.storage_bucket
        return options


class FirebaseServices:
    """An initialized Firebase app with auth and realtime database access."""

    def __init__(self, app: firebase_admin.App) -> None:
        self.app = app

    def reference(self, path: str) -> db.Reference:
        return db.reference(path, app=self.app)

    def verify_id_token(self, id_token: str) -> dict[str, Any]:
        return auth.verify_id_token(id_token, app=self.app)


def initialize_firebase(
    settings: FirebaseSettings | None = None,
    name: str = "cartsmash",
) -> FirebaseServices | None:
    """Initialize (or reuse) the named Firebase app.

    Returns None when the configuration is incomplete; callers then fall back
    to session-only storage.
    """
    settings = settings or FirebaseSettings.from_env()
    if not settings.is_complete:
        logger.warning(
            "Firebase configuration is incomplete (project_id=%s, database_url=%s); "
            "running without cloud storage",
            bool(settings.project_id),
            bool(settings.database_url),
        )
        return None

    try:
        app = firebase_admin.get_app(name)
    except ValueError:
        try:
            if settings.credentials_path:
                cred = credentials.Certificate(settings.credentials_path)
            else:
                cred = credentials.ApplicationDefault()
            app = firebase_admin.initialize_app(
                cred, settings.app_options(), name=name
            )
        except (ValueError, OSError) as e:
            raise FirebaseConfigError(f"Firebase initialization failed: {e}") from e
        logger.info("Firebase app %r initialized for %s", name, settings.project_id)
    return FirebaseServices(app)
