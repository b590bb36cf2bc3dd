import logging

from .common import *

logger = logging.getLogger(__name__)

if not ENV:
    logger.error("ENV is not set, it names the configuration file in conf/")
    exit(1)

try:
    exec(f'from .{ENV} import *')
    logger.info(f"Configuration loaded from conf/{ENV}.py")
except ImportError:
    logger.error(f"Configuration file not found in conf/{ENV}.py")
    exit(1)
