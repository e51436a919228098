# 📄 File: patient_api/shared/utils/__init__.py

# 🧭 Purpose (Layman Explanation):
# Small helpers used across the app: structured logging and filling in email and document templates.

# 🧪 Purpose (Technical Summary):
# Utilities package: structured logging setup and the Jinja2 template environment.

# 🔗 Dependencies:
# - logging.py, templates.py

# 🔄 Connected Modules / Calls From:
# Used by: patient_api.main, middleware, notification services
