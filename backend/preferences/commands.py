# preferences/commands.py
"""
Command layer for application settings.

Same conventions as accounting.commands: every operation returns a
CommandResult, input is validated by serializers inside the command,
and database failures come back as StorageError.
"""

import logging

from django.db import transaction

from accounting.commands import (
    CommandResult,
    ErrorCode,
    storage_guard,
    validation_failure,
)

from .defaults import DEFAULT_SETTINGS
from .models import Setting
from .serializers import (
    BulkSettingsSerializer,
    CategorySerializer,
    SettingInputSerializer,
)

logger = logging.getLogger(__name__)


def _clean_name(name):
    return name.strip() if isinstance(name, str) else ""


@storage_guard
def get_setting(name) -> CommandResult:
    name = _clean_name(name)
    if not name:
        return CommandResult.fail("Setting name is required.")

    setting = Setting.objects.filter(name=name).first()
    if setting is None:
        return CommandResult.fail(f"Setting '{name}' not found.", code=ErrorCode.NOT_FOUND)
    return CommandResult.ok(setting)


@storage_guard
def list_settings() -> CommandResult:
    settings = list(Setting.objects.order_by("name"))
    return CommandResult.ok(settings, count=len(settings))


@storage_guard
def list_settings_by_category(category) -> CommandResult:
    """Settings named "<category>_..."."""
    serializer = CategorySerializer(data={"category": category})
    if not serializer.is_valid():
        return validation_failure(serializer.errors)

    prefix = f"{serializer.validated_data['category']}_"
    settings = list(Setting.objects.filter(name__startswith=prefix).order_by("name"))
    return CommandResult.ok(settings, count=len(settings))


@storage_guard
@transaction.atomic
def set_setting(name, value, setting_type=None, description=None) -> CommandResult:
    """
    Create or update a setting.

    An existing setting keeps its description when none is given.

    Returns:
        CommandResult with {"setting": Setting, "created": bool}
    """
    serializer = SettingInputSerializer(data={
        "setting_name": name,
        "setting_value": value,
        "setting_type": setting_type,
        "description": description,
    })
    if not serializer.is_valid():
        return validation_failure(serializer.errors)
    data = serializer.validated_data

    setting = Setting.objects.select_for_update().filter(name=data["setting_name"]).first()
    created = setting is None
    if created:
        setting = Setting(name=data["setting_name"])

    setting.value = data["encoded_value"]
    setting.setting_type = data["setting_type"]
    if data["description"] is not None:
        setting.description = data["description"]
    setting.save()

    logger.info(
        "Setting %s", "created" if created else "updated",
        extra={"setting_name": setting.name, "setting_type": setting.setting_type},
    )
    return CommandResult.ok({"setting": setting, "created": created})


@storage_guard
@transaction.atomic
def delete_setting(name) -> CommandResult:
    name = _clean_name(name)
    if not name:
        return CommandResult.fail("Setting name is required.")

    deleted, _ = Setting.objects.filter(name=name).delete()
    if not deleted:
        return CommandResult.fail(f"Setting '{name}' not found.", code=ErrorCode.NOT_FOUND)

    logger.info("Setting deleted", extra={"setting_name": name})
    return CommandResult.ok({"deleted": True, "setting_name": name})


def set_settings_bulk(items) -> CommandResult:
    """
    Write up to 50 settings, each one independently.

    A failing item does not stop or undo the others. The result data
    carries per-item outcomes plus succeeded/failed totals.
    """
    envelope = BulkSettingsSerializer(data={"settings": items})
    if not envelope.is_valid():
        return validation_failure(envelope.errors)

    results = []
    for index, item in enumerate(envelope.validated_data["settings"]):
        result = set_setting(
            item.get("setting_name"),
            item.get("setting_value"),
            item.get("setting_type"),
            item.get("description"),
        )
        results.append({
            "index": index,
            "setting_name": item.get("setting_name"),
            "success": result.success,
            "error": result.error,
        })

    succeeded = sum(1 for r in results if r["success"])
    if succeeded < len(results):
        logger.warning(
            "Bulk settings update partially failed",
            extra={"succeeded": succeeded, "failed": len(results) - succeeded},
        )
    return CommandResult.ok({
        "total": len(results),
        "succeeded": succeeded,
        "failed": len(results) - succeeded,
        "results": results,
    })


def initialize_default_settings() -> CommandResult:
    """Upsert every default setting."""
    written = 0
    for default in DEFAULT_SETTINGS:
        result = set_setting(
            default["setting_name"],
            default["setting_value"],
            default["setting_type"],
            default["description"],
        )
        if result.success:
            written += 1
        else:
            logger.error(
                "Default setting could not be written",
                extra={"setting_name": default["setting_name"], "error": result.error},
            )

    return CommandResult.ok({"written": written, "total": len(DEFAULT_SETTINGS)})
