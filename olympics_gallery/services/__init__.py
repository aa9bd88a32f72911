"""Pure helpers shared by the application services (no I/O)."""
