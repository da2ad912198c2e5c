"""In-memory todo CRUD service built on Starlette."""
