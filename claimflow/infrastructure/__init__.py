"""
Infrastructure layer for the ClaimFlow claim management service.

This layer contains the implementation details for external systems integration:
- Database (SQLAlchemy)
- Key-value store (Redis, or in-process outside production)
- Authentication (JWT, server-side sessions, token revocation)
- Background jobs and realtime websocket delivery

The infrastructure layer implements interfaces defined in the domain layer,
following the Dependency Inversion Principle of Clean Architecture.
"""
