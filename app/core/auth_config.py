import os

# JWT configuration
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production-please-use-a-long-random-key")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 30)))


def get_secret_key() -> str:
    return SECRET_KEY
