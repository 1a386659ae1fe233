import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///numberguessr.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Create the leaderboard table on startup when no migrations were run
    CREATE_TABLES_ON_START = os.environ.get('CREATE_TABLES_ON_START', '1') == '1'
    # Comma separated list, '*' allows any origin
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Room settings
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '4'))
    DEFAULT_RANGE_MIN = int(os.environ.get('DEFAULT_RANGE_MIN', '1'))
    DEFAULT_RANGE_MAX = int(os.environ.get('DEFAULT_RANGE_MAX', '100'))
    MAX_DISPLAY_NAME_LENGTH = int(os.environ.get('MAX_DISPLAY_NAME_LENGTH', '32'))
