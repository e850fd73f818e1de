"""
Django Settings - Development Configuration
"""

from .base import *

DEBUG = True

# Database logging
LOGGING["loggers"]["django.db.backends"] = {
    "handlers": ["console"],
    "level": config("DB_LOG_LEVEL", default="INFO"),
    "propagate": False,
}

# Email - Console backend
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# CORS - explicit local frontends only
CORS_ALLOWED_ORIGINS = config(
    "CORS_ALLOWED_ORIGINS",
    default="http://localhost:3000,http://127.0.0.1:3000",
    cast=Csv(),
)
