# preferences/serializers.py
"""
Serializers for the settings API.

SettingInputSerializer checks shape and encodes the value for storage;
SettingSerializer renders a stored setting with its decoded value.
"""

from rest_framework import serializers

from .models import Setting, encode_value


MAX_VALUE_LENGTH = 5000
MAX_CATEGORY_LENGTH = 50
MAX_BULK_ITEMS = 50


class SettingInputSerializer(serializers.Serializer):
    setting_name = serializers.CharField(max_length=100)
    setting_value = serializers.JSONField()
    setting_type = serializers.ChoiceField(
        choices=Setting.SettingType.choices, required=False, allow_null=True,
    )
    description = serializers.CharField(
        max_length=255, required=False, allow_null=True, allow_blank=True,
    )

    def validate(self, attrs):
        setting_type = attrs.get("setting_type") or Setting.SettingType.STRING
        try:
            encoded = encode_value(attrs["setting_value"], setting_type)
        except ValueError as exc:
            raise serializers.ValidationError({"setting_value": str(exc)})

        if len(encoded) > MAX_VALUE_LENGTH:
            raise serializers.ValidationError(
                {"setting_value": f"Ensure this value has no more than {MAX_VALUE_LENGTH} characters."}
            )

        attrs["setting_type"] = setting_type
        attrs["encoded_value"] = encoded
        attrs["description"] = attrs.get("description") or None
        return attrs


class CategorySerializer(serializers.Serializer):
    category = serializers.CharField(max_length=MAX_CATEGORY_LENGTH)


class BulkSettingsSerializer(serializers.Serializer):
    """Envelope check only; each item is validated on its own."""
    settings = serializers.ListField(
        child=serializers.DictField(),
        min_length=1,
        max_length=MAX_BULK_ITEMS,
    )


class SettingSerializer(serializers.ModelSerializer):
    setting_name = serializers.CharField(source="name", read_only=True)
    setting_value = serializers.JSONField(source="typed_value", read_only=True)

    class Meta:
        model = Setting
        fields = [
            "setting_name", "setting_value", "setting_type",
            "description", "created_at", "updated_at",
        ]
        read_only_fields = fields
