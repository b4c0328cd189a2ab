"""
Blog service settings, read from environment variables.
"""
import os

DATABASE_URL = os.getenv(
    "DATABASE_URL", "postgresql+psycopg2://backend_user:changeme@db:5432/blog_db"
)
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))

# Applied to connects, statements and pool checkouts
STORAGE_TIMEOUT_SECONDS = float(os.getenv("STORAGE_TIMEOUT_SECONDS", "5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
