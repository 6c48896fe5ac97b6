"""Blog post CRUD service with single-admin bearer token auth."""
