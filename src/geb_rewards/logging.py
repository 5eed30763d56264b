"""
The package-wide logger. It writes to stderr and does not propagate to the root logger.
"""

import logging

logger = logging.getLogger(__name__)
logger.propagate = False
logger.setLevel(logging.INFO)
logger.addHandler(logging.StreamHandler())
