import os

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./events.db")


def get_database_url():
    return DATABASE_URL
