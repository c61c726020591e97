"""Firebase Admin SDK setup: credential discovery and app initialization."""
import json
import logging
import os
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import credentials

logger = logging.getLogger(__name__)

CREDENTIAL_HELP = (
    "Firebase credentials not found. Please set one of:\n"
    "1. FIREBASE_CREDENTIALS_JSON (JSON string or path to JSON file)\n"
    "2. FIREBASE_CREDENTIALS_PATH (path to service account JSON file)\n"
    "3. GOOGLE_APPLICATION_CREDENTIALS (path to service account JSON file)\n"
    "4. Individual env vars (FIREBASE_PROJECT_ID, FIREBASE_PRIVATE_KEY, etc.)"
)


def _read_json_file(path: Optional[str]) -> Optional[Dict[str, Any]]:
    if path and os.path.exists(path):
        with open(path, 'r') as f:
            return json.load(f)
    return None


def _credentials_from_env_vars() -> Optional[Dict[str, Any]]:
    project_id = os.getenv('FIREBASE_PROJECT_ID')
    if not project_id:
        return None
    return {
        "type": "service_account",
        "project_id": project_id,
        "private_key_id": os.getenv('FIREBASE_PRIVATE_KEY_ID'),
        "private_key": os.getenv('FIREBASE_PRIVATE_KEY', '').replace('\\n', '\n'),
        "client_email": os.getenv('FIREBASE_CLIENT_EMAIL'),
        "client_id": os.getenv('FIREBASE_CLIENT_ID'),
        "auth_uri": "https://accounts.google.com/o/oauth2/auth",
        "token_uri": "https://oauth2.googleapis.com/token",
        "auth_provider_x509_cert_url": "https://www.googleapis.com/oauth2/v1/certs",
        "client_x509_cert_url": os.getenv('FIREBASE_CLIENT_CERT_URL'),
        "universe_domain": "googleapis.com"
    }


def get_firebase_credentials() -> Dict[str, Any]:
    """
    Load the service account for the Admin SDK.

    Sources, first match wins:
    1. FIREBASE_CREDENTIALS_JSON - inline JSON or a path to a JSON file
    2. FIREBASE_CREDENTIALS_PATH - path to a service account file
    3. GOOGLE_APPLICATION_CREDENTIALS - path to a service account file
    4. FIREBASE_PROJECT_ID plus the FIREBASE_PRIVATE_KEY* variables

    Raises:
        ValueError: If none of the sources yields credentials
    """
    inline = os.getenv('FIREBASE_CREDENTIALS_JSON')
    if inline:
        try:
            return json.loads(inline)
        except json.JSONDecodeError:
            from_file = _read_json_file(inline)
            if from_file is not None:
                return from_file

    for env_var in ('FIREBASE_CREDENTIALS_PATH', 'GOOGLE_APPLICATION_CREDENTIALS'):
        from_file = _read_json_file(os.getenv(env_var))
        if from_file is not None:
            return from_file

    from_vars = _credentials_from_env_vars()
    if from_vars is not None:
        return from_vars

    raise ValueError(CREDENTIAL_HELP)


def init_firebase() -> Optional[str]:
    """Initialize the default Firebase app.

    Returns "emulator" or "cloud" for the mode used, or None when Firebase
    could not be configured.
    """
    if firebase_admin._apps:
        return "emulator" if os.getenv("FIRESTORE_EMULATOR_HOST") else "cloud"

    if os.getenv("FIRESTORE_EMULATOR_HOST"):
        # Emulators accept any project id and need no real credentials
        project_id = os.getenv("GCLOUD_PROJECT") or os.getenv("FIREBASE_PROJECT_ID") or "demo-todo-groups"
        os.environ.setdefault("GCLOUD_PROJECT", project_id)
        firebase_admin.initialize_app(options={'projectId': project_id})
        logger.info(f"Firebase initialized against emulator {os.getenv('FIRESTORE_EMULATOR_HOST')}")
        return "emulator"

    try:
        cred = credentials.Certificate(get_firebase_credentials())
    except ValueError as e:
        logger.warning(f"{e}\nTo use emulators instead, set FIRESTORE_EMULATOR_HOST=localhost:8080")
        return None

    firebase_admin.initialize_app(cred)
    logger.info("Firebase initialized (cloud mode)")
    return "cloud"
