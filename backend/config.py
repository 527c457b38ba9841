import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'delfos-dev-secret'
    # Session records and the winner ledger live here
    DATA_DIR = os.environ.get('DATA_DIR') or 'data'
    # Defaults to the bank shipped inside the delfos package
    QUESTION_BANK_PATH = os.environ.get('QUESTION_BANK_PATH')
    DEFAULT_PROFILE = os.environ.get('DEFAULT_PROFILE', 'credit')
    QUESTIONS_PER_SAMPLE = int(os.environ.get('QUESTIONS_PER_SAMPLE', '8'))
    # Comma separated; '*' allows any origin
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', '*').split(',') if o.strip()]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    PORT = int(os.environ.get('PORT', '8080'))
