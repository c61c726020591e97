from flask import current_app, jsonify

from . import dashboard_bp
from .context import get_clock, get_pending_counts, get_store, viewer_tz_offset
from ..middleware.auth_middleware import AuthMiddleware
from ..services.generation_service import GenerationService
from ..utils.dates import local_day_key


@dashboard_bp.post("/generate")
@AuthMiddleware.verify_token
async def generate_today():
    """Run the once-per-day generation pass for all of the caller's groups"""
    user = AuthMiddleware.get_current_user()
    service = GenerationService(get_store(), get_clock(), epoch=current_app.config["EPOCH_DATE"])
    result = await service.generate_for_user(user["id"], user.get("email", ""), viewer_tz_offset())
    return jsonify(result.to_dict()), 200


@dashboard_bp.get("/pending-counts")
@AuthMiddleware.verify_token
async def pending_counts():
    """Pending task count per group for today"""
    user = AuthMiddleware.get_current_user()
    today_key = local_day_key(get_clock().today(viewer_tz_offset()))
    aggregator = get_pending_counts().aggregator_for(user["id"], today_key)
    return jsonify({
        "date": today_key,
        "counts": aggregator.counts,
        "loaded": aggregator.loaded,
    }), 200
