from .logger import Logger as Logger
