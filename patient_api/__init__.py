# 📄 File: patient_api/__init__.py
#
# 🧭 Purpose (Layman Explanation):
# Tells Python that this folder holds the consultation app's code and records its version.
#
# 🧪 Purpose (Technical Summary):
# Application package initialization with version and package metadata for the
# Patient Consultation FastAPI service.
#
# 🔗 Dependencies:
# - Python packaging system
#
# 🔄 Connected Modules / Calls From:
# - main.py (application entry point)
# - Package imports throughout the application

"""
Patient Consultation API

Backend for The Empowered Patient menopause consultation: the guided questionnaire,
registration with discount codes, Stripe payments and document delivery by email.
"""

__version__ = "1.0.0"
__title__ = "Patient Consultation API"
__description__ = "Guided menopause consultation, payments and document delivery"

__all__ = [
    "__version__",
    "__title__",
    "__description__",
]
