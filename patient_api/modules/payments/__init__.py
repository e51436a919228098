# 📄 File: patient_api/modules/payments/__init__.py
# 🧭 Purpose (Layman Explanation):
# Everything about paying for the consultation: discount codes, checkout, registration and
# the record of who has access.
# 🧪 Purpose (Technical Summary):
# Payments module: subscription persistence, Stripe gateway, discount math, payment,
# registration and webhook services, the access dependency and the payment endpoints.
# 🔗 Dependencies:
# stripe, SQLAlchemy, FastAPI, supabase
# 🔄 Connected Modules / Calls From:
# patient_api.api.v1.router, consultation endpoints (access gate), notifications module

"""
Payments Module

- Domain: Subscription model, discount math, Payment/Registration/Webhook services
- Infrastructure: user_subscriptions and webhook_events tables, StripeGateway
- Presentation: /payments endpoints, require_active_subscription
"""
