"""Logging configuration for the MindQuest service."""

import os
import logging
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler


class LogConfig:
    LOG_DIR = 'logs'

    APP_LOG_FILE = 'app.log'
    ERROR_LOG_FILE = 'error.log'
    TRANSACTION_LOG_FILE = 'transactions.log'
    SECURITY_LOG_FILE = 'security.log'

    LOG_LEVELS = {
        'development': logging.DEBUG,
        'testing': logging.INFO,
        'production': logging.INFO,
    }

    MAX_BYTES = 10 * 1024 * 1024
    BACKUP_COUNT = 10

    DETAILED_FORMAT = (
        '%(asctime)s - %(name)s - %(levelname)s - '
        '[%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s'
    )
    SIMPLE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
    TRANSACTION_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

    @classmethod
    def get_log_level(cls, env='development'):
        return cls.LOG_LEVELS.get(env, logging.INFO)


def setup_logging(app):
    env = app.config.get('ENV', 'development')
    log_level = LogConfig.get_log_level(env)

    app.logger.handlers.clear()
    app.logger.setLevel(log_level)

    if env == 'development':
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter(LogConfig.SIMPLE_FORMAT))
        app.logger.addHandler(console_handler)

    transaction_logger = logging.getLogger('transactions')
    transaction_logger.setLevel(logging.INFO)
    transaction_logger.handlers.clear()

    security_logger = logging.getLogger('security')
    security_logger.setLevel(logging.WARNING)
    security_logger.handlers.clear()

    # Tests run without touching the filesystem
    if not app.config.get('LOG_TO_FILES', True):
        transaction_logger.propagate = True
        security_logger.propagate = True
        return

    log_dir = os.path.join(app.root_path, '..', LogConfig.LOG_DIR)
    os.makedirs(log_dir, exist_ok=True)

    app_handler = RotatingFileHandler(
        os.path.join(log_dir, LogConfig.APP_LOG_FILE),
        maxBytes=LogConfig.MAX_BYTES,
        backupCount=LogConfig.BACKUP_COUNT
    )
    app_handler.setLevel(log_level)
    app_handler.setFormatter(logging.Formatter(LogConfig.DETAILED_FORMAT))
    app.logger.addHandler(app_handler)

    error_handler = RotatingFileHandler(
        os.path.join(log_dir, LogConfig.ERROR_LOG_FILE),
        maxBytes=LogConfig.MAX_BYTES,
        backupCount=LogConfig.BACKUP_COUNT
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(logging.Formatter(LogConfig.DETAILED_FORMAT))
    app.logger.addHandler(error_handler)

    transaction_handler = TimedRotatingFileHandler(
        os.path.join(log_dir, LogConfig.TRANSACTION_LOG_FILE),
        when='midnight',
        interval=1,
        backupCount=90
    )
    transaction_handler.setLevel(logging.INFO)
    transaction_handler.setFormatter(logging.Formatter(LogConfig.TRANSACTION_FORMAT))
    transaction_logger.addHandler(transaction_handler)
    transaction_logger.propagate = False

    security_handler = TimedRotatingFileHandler(
        os.path.join(log_dir, LogConfig.SECURITY_LOG_FILE),
        when='midnight',
        interval=1,
        backupCount=365
    )
    security_handler.setLevel(logging.WARNING)
    security_handler.setFormatter(logging.Formatter(LogConfig.DETAILED_FORMAT))
    security_logger.addHandler(security_handler)
    security_logger.propagate = False

    app.logger.info('=' * 80)
    app.logger.info('MindQuest Service Starting')
    app.logger.info(f'Environment: {env}')
    app.logger.info(f'Log Level: {logging.getLevelName(log_level)}')
    app.logger.info(f'Log Directory: {log_dir}')
    app.logger.info('=' * 80)


def get_transaction_logger():
    return logging.getLogger('transactions')


def get_security_logger():
    return logging.getLogger('security')


def log_transaction(user_id, transaction_type, amount, currency, description='', **kwargs):
    """Write one XP or token ledger line. `currency` is 'xp' or 'tokens'."""
    logger = get_transaction_logger()

    metadata = ' | '.join([f'{k}={v}' for k, v in kwargs.items()])
    log_message = (
        f"USER:{user_id} | TYPE:{transaction_type} | "
        f"AMOUNT:{amount} | CURRENCY:{currency} | "
        f"DESC:{description}"
    )
    if metadata:
        log_message += f" | {metadata}"

    logger.info(log_message)


def log_security_event(event_type, user_id=None, ip_address=None, description='', severity='WARNING'):
    logger = get_security_logger()

    log_message = f"EVENT:{event_type}"
    if user_id:
        log_message += f" | USER:{user_id}"
    if ip_address:
        log_message += f" | IP:{ip_address}"
    if description:
        log_message += f" | DESC:{description}"

    log_func = getattr(logger, severity.lower(), logger.warning)
    log_func(log_message)
