"""
auth — User authentication module.

Provides:
  • JWT session token signing & verification
  • Password hashing (bcrypt) and reset-token digests
  • Signup / login / password reset / password update API routes
  • ``protect`` and ``restrict_to`` FastAPI dependencies
"""
