"""
auth: user authentication module.

Provides:
  • Signed token creation & verification
  • Password hashing (bcrypt)
  • Register / Login / Me API routes
  • ``require_user_id`` and ``resolve_scope`` FastAPI dependencies
"""
