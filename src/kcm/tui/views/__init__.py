"""Rich renderers for the selector views."""
