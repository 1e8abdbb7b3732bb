from reworkit.api.routes import health, logs, packages

__all__ = [
    "health",
    "logs",
    "packages",
]
