"""Bootstrap wiring: logging, database and session construction."""
