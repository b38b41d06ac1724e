import logging
import os

ll = os.environ.get('ATOMDESC_LOG_LEVEL', default='WARNING')

logging.basicConfig(
    level=getattr(logging, ll),
    format='%(name)-12s: %(levelname)-8s %(message)s',
)
logger = logging.getLogger(__name__)
