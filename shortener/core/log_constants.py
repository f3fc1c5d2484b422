"""
Audit log taxonomy.

The external log service only accepts entries whose stack, level and package
come from these fixed sets.
"""

import logging
from enum import Enum


class LogStack(str, Enum):
    BACKEND = "backend"


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


class LogPackage(str, Enum):
    CACHE = "cache"
    CONTROLLER = "controller"
    CRON_JOB = "cron_job"
    DB = "db"
    DOMAIN = "domain"
    HANDLER = "handler"
    REPOSITORY = "repository"
    ROUTE = "route"
    SERVICE = "service"
    AUTH = "auth"
    CONFIG = "config"
    MIDDLEWARE = "middleware"


# Mapping onto the standard library levels used for the local mirror
LOCAL_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.FATAL: logging.CRITICAL,
}
