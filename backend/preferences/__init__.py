# preferences/__init__.py
"""
Preferences app - typed key/value application settings.

Values are stored as text and converted according to their setting_type
(string, number, boolean, json) on the way in and out.
"""
