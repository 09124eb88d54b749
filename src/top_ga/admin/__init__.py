"""Admin settings screen."""

from .settings_page import Notice, PropertyOption, SettingsPage, SettingsView, property_options

__all__ = ["Notice", "PropertyOption", "SettingsPage", "SettingsView", "property_options"]
