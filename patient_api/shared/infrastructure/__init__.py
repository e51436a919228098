"""
Infrastructure layer package for the Patient Consultation API.
Provides database connections and the Supabase auth gateway.
"""
