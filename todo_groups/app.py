import atexit
import logging

from flask import Flask, jsonify
from flask_cors import CORS

from .api import dashboard_bp, groups_bp, instances_bp
from .api.context import EXTENSION_KEY
from .config import Settings
from .firebase_utils import init_firebase
from .middleware.error_middleware import register_error_handlers
from .services.pending_count_service import PendingCountRegistry
from .store import MemoryStore
from .utils.dates import Clock

logger = logging.getLogger(__name__)


def _default_store(dev_mode: bool):
    if dev_mode:
        print("🔧 Running in DEV_MODE - in-memory store, identity from X-User-Id")
        return MemoryStore(), "dev"

    mode = init_firebase()
    if mode is None:
        raise RuntimeError(
            "Firebase is not configured. Set FIRESTORE_EMULATOR_HOST for the emulator, "
            "provide service account credentials, or run with DEV_MODE=true"
        )
    if mode == "emulator":
        print("🔥 Firebase Emulator Mode - NO CLOUD QUOTA USED")
    else:
        print("✓ Firebase initialized successfully (CLOUD MODE)")

    from .store.firestore_store import FirestoreStore
    return FirestoreStore.from_firebase_app(), mode


def create_app(store=None, clock=None, dev_mode=None):
    """Create and configure the Flask application.

    Args:
        store: DocumentStore to use. Defaults to an in-memory store in
            DEV_MODE and to Firestore otherwise.
        clock: Source of "today"; tests pass a fixed clock.
        dev_mode: Overrides the DEV_MODE setting.
    """
    app = Flask(__name__)
    app.config["DEV_MODE"] = Settings.DEV_MODE if dev_mode is None else dev_mode
    app.config["EPOCH_DATE"] = Settings.EPOCH_DATE
    app.config["SECRET_KEY"] = Settings.SECRET_KEY

    CORS(app,
         resources={r"/api/*": {"origins": Settings.CORS_ORIGINS}},
         allow_headers=["Content-Type", "Authorization", "X-User-Id", "X-User-Email", "X-Timezone-Offset"],
         methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"])

    if store is None:
        store, backend = _default_store(app.config["DEV_MODE"])
    else:
        backend = type(store).__name__

    pending_counts = PendingCountRegistry(store, idle_timeout=Settings.PENDING_COUNTS_IDLE_SECONDS)
    atexit.register(pending_counts.stop_all)

    app.extensions[EXTENSION_KEY] = {
        "store": store,
        "clock": clock or Clock(),
        "pending_counts": pending_counts,
    }

    @app.get("/")
    def health():
        return jsonify({
            "status": "ok",
            "service": "todo-groups-api",
            "store": backend,
        }), 200

    register_error_handlers(app)

    app.register_blueprint(groups_bp)
    app.register_blueprint(instances_bp)
    app.register_blueprint(dashboard_bp)

    return app


def main():
    Settings.validate()
    app = create_app()
    print(f"Server will be available at: http://localhost:{Settings.PORT}")
    app.run(host="0.0.0.0", port=Settings.PORT, debug=Settings.DEBUG)


if __name__ == "__main__":
    main()
