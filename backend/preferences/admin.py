# preferences/admin.py
from django.contrib import admin

from .models import Setting


@admin.register(Setting)
class SettingAdmin(admin.ModelAdmin):
    list_display = ["name", "setting_type", "value", "updated_at"]
    list_filter = ["setting_type"]
    search_fields = ["name", "description"]
