from flask import jsonify

from . import groups_bp
from .context import get_store, json_body, timestamp_to_json
from ..middleware.auth_middleware import AuthMiddleware
from ..models.group_model import GroupModel


def group_to_json(group):
    return {
        "group_id": group.id,
        "name": group.name,
        "icon": group.icon,
        "owner_id": group.owner_id,
        "created_at": timestamp_to_json(group.created_at),
    }


@groups_bp.get("")
@AuthMiddleware.verify_token
async def list_groups():
    user = AuthMiddleware.get_current_user()
    groups = await GroupModel(get_store()).list_owned_groups(user["id"])
    return jsonify({"groups": [group_to_json(g) for g in groups]}), 200


@groups_bp.post("")
@AuthMiddleware.verify_token
async def create_group():
    user = AuthMiddleware.get_current_user()
    payload = json_body()
    group = await GroupModel(get_store()).create_group(
        owner_id=user["id"],
        name=payload.get("name"),
        icon=(payload.get("icon") or "default"),
    )
    return jsonify(group_to_json(group)), 201


@groups_bp.get("/<group_id>")
@AuthMiddleware.verify_token
async def get_group(group_id):
    user = AuthMiddleware.get_current_user()
    group = await GroupModel(get_store()).get_owned_group(group_id, user["id"])
    return jsonify(group_to_json(group)), 200


@groups_bp.delete("/<group_id>")
@AuthMiddleware.verify_token
async def delete_group(group_id):
    """Delete the group with its templates and the caller's instances in it"""
    user = AuthMiddleware.get_current_user()
    removed = await GroupModel(get_store()).delete_group(group_id, user["id"])
    return jsonify({
        "group_id": group_id,
        "deleted_templates": removed["templates"],
        "deleted_instances": removed["instances"],
    }), 200
