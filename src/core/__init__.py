"""Core: configuración, dominio y contratos."""
