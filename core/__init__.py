# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the business logic behind the HTTP routes:
# - models/: Pydantic schemas for request/response validation
# - services/: Activity feed, challenges, rewards, levels, messages, push
#
# Services talk to the store through lib.supabase_client and raise
# app.exceptions errors; they never touch Request/Response objects.
# =============================================================================
