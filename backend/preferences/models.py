# preferences/models.py
"""
Application settings.

A Setting is a named value stored as text. setting_type decides how a
value is encoded on write and decoded on read (encode_value /
decode_value below).
"""

import json
import math

from django.db import models


class Setting(models.Model):

    class SettingType(models.TextChoices):
        STRING = "string", "String"
        NUMBER = "number", "Number"
        BOOLEAN = "boolean", "Boolean"
        JSON = "json", "JSON"

    name = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    setting_type = models.CharField(
        max_length=10,
        choices=SettingType.choices,
        default=SettingType.STRING,
    )
    description = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.setting_type})"

    @property
    def typed_value(self):
        return decode_value(self.value, self.setting_type)


TRUE_TEXT = "true"
FALSE_TEXT = "false"
FALSE_STRINGS = {"", "false", "0", "no", "off"}


def encode_value(value, setting_type: str) -> str:
    """
    Convert a typed value to its stored text form.

    Raises:
        ValueError: value does not fit setting_type
    """
    if setting_type == Setting.SettingType.NUMBER:
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ValueError("Invalid value for number setting.")
        text = value.strip() if isinstance(value, str) else str(value)
        try:
            number = float(text)
        except ValueError:
            raise ValueError("Invalid value for number setting.")
        if not math.isfinite(number):
            raise ValueError("Invalid value for number setting.")
        return text

    if setting_type == Setting.SettingType.BOOLEAN:
        if isinstance(value, str):
            truthy = value.strip().lower() not in FALSE_STRINGS
        else:
            truthy = bool(value)
        return TRUE_TEXT if truthy else FALSE_TEXT

    if setting_type == Setting.SettingType.JSON:
        if isinstance(value, str):
            try:
                json.loads(value)
            except ValueError:
                raise ValueError("Invalid JSON value.")
            return value
        return json.dumps(value)

    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return TRUE_TEXT if value else FALSE_TEXT
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def decode_value(text: str, setting_type: str):
    """Convert stored text back to a typed value; unparseable text is returned as-is."""
    if setting_type == Setting.SettingType.NUMBER:
        try:
            number = float(text)
        except (TypeError, ValueError):
            return text
        return int(number) if number.is_integer() else number

    if setting_type == Setting.SettingType.BOOLEAN:
        return text in (TRUE_TEXT, "1")

    if setting_type == Setting.SettingType.JSON:
        try:
            return json.loads(text)
        except (TypeError, ValueError):
            return text

    return text
