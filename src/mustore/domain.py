"""MuStore bounded context: catalogue, carts, favorites and orders.

Every aggregate lives in this one domain so that checkout can reserve stock,
persist the order and empty the cart inside a single unit of work.
"""

import logging

from protean.domain import Domain

from mustore.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

# Suppress noisy library loggers
logging.getLogger("protean").setLevel(logging.WARNING)

mustore = Domain(name="mustore")
