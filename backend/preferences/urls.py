# preferences/urls.py
"""
URL configuration for the settings API (mounted under /api/settings/).

Fixed paths come before <name>/ so "bulk" and "initialize" are never
read as setting names.
"""

from django.urls import path

from .views import (
    SettingListView,
    SettingInitializeView,
    SettingBulkView,
    SettingCategoryView,
    SettingDetailView,
)

app_name = "preferences"

urlpatterns = [
    path("", SettingListView.as_view(), name="setting-list"),
    path("initialize/", SettingInitializeView.as_view(), name="setting-initialize"),
    path("bulk/", SettingBulkView.as_view(), name="setting-bulk"),
    path("category/<str:category>/", SettingCategoryView.as_view(), name="setting-category"),
    path("<str:name>/", SettingDetailView.as_view(), name="setting-detail"),
]
