from flask import Blueprint

groups_bp = Blueprint("groups", __name__, url_prefix="/api/groups")
instances_bp = Blueprint("instances", __name__, url_prefix="/api")
dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")

# Import modules so routes attach
from . import groups  # noqa
from . import templates  # noqa - template routes live under /api/groups
from . import instances  # noqa
from . import dashboard  # noqa

__all__ = [
    "groups_bp",
    "instances_bp",
    "dashboard_bp",
]
