# preferences/defaults.py
"""Settings written by initialize_default_settings()."""

DEFAULT_SETTINGS = [
    {
        "setting_name": "app_name",
        "setting_value": "Cari Takip Uygulaması",
        "setting_type": "string",
        "description": "Application name",
    },
    {
        "setting_name": "currency",
        "setting_value": "TRY",
        "setting_type": "string",
        "description": "Main currency",
    },
    {
        "setting_name": "date_format",
        "setting_value": "DD/MM/YYYY",
        "setting_type": "string",
        "description": "Date display format",
    },
    {
        "setting_name": "decimal_places",
        "setting_value": 2,
        "setting_type": "number",
        "description": "Decimal places shown for amounts",
    },
    {
        "setting_name": "auto_backup",
        "setting_value": True,
        "setting_type": "boolean",
        "description": "Automatic backups enabled",
    },
    {
        "setting_name": "backup_frequency",
        "setting_value": 7,
        "setting_type": "number",
        "description": "Backup frequency (days)",
    },
    {
        "setting_name": "email_notifications",
        "setting_value": False,
        "setting_type": "boolean",
        "description": "Email notifications enabled",
    },
    {
        "setting_name": "theme_settings",
        "setting_value": {
            "theme": "light",
            "primaryColor": "#2563eb",
            "fontSize": "medium",
        },
        "setting_type": "json",
        "description": "Theme settings",
    },
    {
        "setting_name": "report_settings",
        "setting_value": {
            "defaultPeriod": "monthly",
            "includeZeroBalances": False,
            "groupByCategory": True,
        },
        "setting_type": "json",
        "description": "Default report settings",
    },
]
