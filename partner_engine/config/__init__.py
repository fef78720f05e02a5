"""Configuration: runtime settings, program tables and database wiring."""
