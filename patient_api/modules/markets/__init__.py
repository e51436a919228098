# 📄 File: patient_api/modules/markets/__init__.py
# 🧭 Purpose (Layman Explanation):
# Regional settings for the UK, US and Australian versions of the site.
# 🧪 Purpose (Technical Summary):
# Markets module: static market configuration, hostname resolution and read-only endpoints.
# 🔗 Dependencies:
# pydantic, FastAPI
# 🔄 Connected Modules / Calls From:
# patient_api.api.v1.router, payments and notifications modules

"""
Markets Module

- Domain: MarketConfig model and hostname/origin resolution
- Presentation: GET /markets and GET /markets/resolve
"""
