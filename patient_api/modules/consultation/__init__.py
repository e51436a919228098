# 📄 File: patient_api/modules/consultation/__init__.py
# 🧭 Purpose (Layman Explanation):
# The guided menopause questionnaire: its pages and questions, the patient's saved answers,
# how far along they are and their symptom score.
# 🧪 Purpose (Technical Summary):
# Consultation module: static question catalog, progress derivation, full-replace response
# storage, Greene Scale scoring and the consultation endpoints.
# 🔗 Dependencies:
# pydantic, SQLAlchemy, FastAPI
# 🔄 Connected Modules / Calls From:
# patient_api.api.v1.router, notifications document service

"""
Consultation Module

- Domain: catalog, question/progress models, progress derivation, Greene Scale, ResponseService
- Infrastructure: user_responses and user_progress tables
- Presentation: /consultation endpoints
"""
