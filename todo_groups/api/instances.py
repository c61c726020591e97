from flask import jsonify, request

from . import instances_bp
from .context import get_clock, get_store, json_body, viewer_tz_offset
from ..middleware.auth_middleware import AuthMiddleware
from ..models.entities import TaskStatus
from ..models.group_model import GroupModel
from ..models.instance_model import InstanceModel
from ..services.materializer_service import InstanceMaterializer
from ..utils.dates import local_day_key, parse_day_key
from ..utils.errors import ValidationError
from ..utils.validators import Validators


def instance_to_json(instance):
    return {
        "instance_id": instance.id,
        "title": instance.title,
        "start_time": instance.start_time,
        "end_time": instance.end_time,
        "date": instance.date,
        "status": instance.status.value,
        "user_id": instance.user_id,
        "group_id": instance.group_id,
        "template_id": instance.template_id,
    }


@instances_bp.get("/groups/<group_id>/instances")
@AuthMiddleware.verify_token
async def list_day_instances(group_id):
    """A day's tasks in a group; days other than today are materialized on first view"""
    user = AuthMiddleware.get_current_user()
    store = get_store()
    await GroupModel(store).get_owned_group(group_id, user["id"])

    today_key = local_day_key(get_clock().today(viewer_tz_offset()))
    date_param = (request.args.get("date") or "").strip()
    day = parse_day_key(date_param) if date_param else parse_day_key(today_key)
    date_key = local_day_key(day)

    # Today is generated by the dashboard's daily pass
    if date_key != today_key:
        await InstanceMaterializer(store).ensure_instances(user["id"], group_id, day)

    instances = await InstanceModel(store).list_for_day(user["id"], group_id, date_key)
    return jsonify({
        "date": date_key,
        "instances": [instance_to_json(i) for i in instances],
    }), 200


@instances_bp.patch("/instances/<instance_id>/toggle")
@AuthMiddleware.verify_token
async def toggle_instance(instance_id):
    user = AuthMiddleware.get_current_user()
    instance = await InstanceModel(get_store()).toggle_status(instance_id, user["id"])
    return jsonify(instance_to_json(instance)), 200


@instances_bp.patch("/instances/<instance_id>")
@AuthMiddleware.verify_token
async def update_instance_status(instance_id):
    user = AuthMiddleware.get_current_user()
    status = json_body().get("status")
    if not Validators.validate_status(status):
        raise ValidationError("Status must be one of: pending, completed")
    instance = await InstanceModel(get_store()).set_status(instance_id, user["id"], TaskStatus(status))
    return jsonify(instance_to_json(instance)), 200
