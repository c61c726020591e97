import os
from dotenv import load_dotenv

from ..models.entities import EPOCH_DAY_KEY

# Load environment variables
load_dotenv()


class Settings:
    # Flask settings
    SECRET_KEY = os.getenv('SECRET_KEY')
    FLASK_ENV = os.getenv('FLASK_ENV', 'development')
    DEBUG = FLASK_ENV == 'development'
    PORT = int(os.getenv('PORT', 5000))

    # Run against the in-memory store with header identity
    DEV_MODE = os.getenv('DEV_MODE', 'false').lower() == 'true'

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # CORS settings
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', 'http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173').split(',')

    # Firebase settings; credential files are located by firebase_utils
    FIREBASE_PROJECT_ID = os.getenv('FIREBASE_PROJECT_ID')
    FIRESTORE_EMULATOR_HOST = os.getenv('FIRESTORE_EMULATOR_HOST')

    # Watermark value for users that never ran the daily generation
    EPOCH_DATE = os.getenv('EPOCH_DATE', EPOCH_DAY_KEY)

    # Live pending-count listeners unused for this long are stopped
    PENDING_COUNTS_IDLE_SECONDS = int(os.getenv('PENDING_COUNTS_IDLE_SECONDS', 15 * 60))

    @classmethod
    def validate(cls):
        """Validate required settings for cloud mode"""
        if cls.DEV_MODE or cls.FIRESTORE_EMULATOR_HOST:
            return True

        required_vars = [
            'FIREBASE_PROJECT_ID',
            'SECRET_KEY',
        ]

        missing_vars = []
        for var in required_vars:
            if not getattr(cls, var):
                missing_vars.append(var)

        if missing_vars:
            raise ValueError(f"Missing required environment variables: {', '.join(missing_vars)}")

        # Validate SECRET_KEY strength
        if cls.SECRET_KEY and len(cls.SECRET_KEY) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters long")

        return True
