"""Administrative command-line scripts.  Run with ``python -m arta_backend.scripts.<name>``."""
