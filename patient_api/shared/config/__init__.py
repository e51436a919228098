# 📄 File: patient_api/shared/config/__init__.py
# 🧭 Purpose (Layman Explanation):
# The app's control panel: API keys, prices, database address and the Supabase connection.
# 🧪 Purpose (Technical Summary):
# Re-exports the pydantic-settings Settings model and its cached accessor. The Supabase
# client lives in config.supabase and is imported from there directly.
# 🔗 Dependencies:
# settings.py
# 🔄 Connected Modules / Calls From:
# patient_api.main, services, gateways and infrastructure needing configuration

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
