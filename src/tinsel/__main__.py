"""Run the Tinsel service: python -m tinsel"""

import uvicorn

from tinsel.config import load_config
from tinsel.logging_config import setup_logging

config = load_config()
setup_logging(config.log_level)
uvicorn.run(
    "tinsel.app:create_app",
    host=config.host,
    port=config.port,
    factory=True,
    log_level=config.log_level.lower(),
)
