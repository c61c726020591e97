from flask import jsonify

from . import groups_bp
from .context import get_clock, get_store, json_body, timestamp_to_json, viewer_tz_offset
from .instances import instance_to_json
from ..middleware.auth_middleware import AuthMiddleware
from ..models.group_model import GroupModel
from ..models.template_model import TemplateModel
from ..services.materializer_service import InstanceMaterializer


def template_to_json(template):
    return {
        "template_id": template.id,
        "title": template.title,
        "start_time": template.start_time,
        "end_time": template.end_time,
        "recurrence": template.recurrence.to_dict() if template.recurrence else None,
        "group_id": template.group_id,
        "created_at": timestamp_to_json(template.created_at),
    }


@groups_bp.get("/<group_id>/templates")
@AuthMiddleware.verify_token
async def list_templates(group_id):
    user = AuthMiddleware.get_current_user()
    store = get_store()
    await GroupModel(store).get_owned_group(group_id, user["id"])
    templates = await TemplateModel(store).list_templates(group_id)
    return jsonify({"templates": [template_to_json(t) for t in templates]}), 200


@groups_bp.post("/<group_id>/templates")
@AuthMiddleware.verify_token
async def create_template(group_id):
    """Create a template and, if it applies today, today's instance for the creator"""
    user = AuthMiddleware.get_current_user()
    store = get_store()
    await GroupModel(store).get_owned_group(group_id, user["id"])

    template = await TemplateModel(store).create_template(group_id, json_body())
    today = get_clock().today(viewer_tz_offset())
    instance = await InstanceMaterializer(store).materialize_template(user["id"], template, today)

    return jsonify({
        "template": template_to_json(template),
        "today_instance": instance_to_json(instance) if instance else None,
    }), 201


@groups_bp.delete("/<group_id>/templates/<template_id>")
@AuthMiddleware.verify_token
async def delete_template(group_id, template_id):
    user = AuthMiddleware.get_current_user()
    store = get_store()
    await GroupModel(store).get_owned_group(group_id, user["id"])
    await TemplateModel(store).delete_template(group_id, template_id)
    return jsonify({"template_id": template_id, "deleted": True}), 200
