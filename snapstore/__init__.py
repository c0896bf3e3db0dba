import logging
from pathlib import Path

import sentry_sdk
from dotenv import load_dotenv
from sentry_sdk.integrations.logging import LoggingIntegration

__version__ = "0.3.1"

# Load environment variables early so SENTRY_DSN and storage credentials are visible
load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env")

from snapstore.settings import get_sentry_settings  # noqa: E402

# Initialize Sentry as early as possible (only if DSN is provided)
_sentry = get_sentry_settings()
if _sentry.enabled:
    sentry_sdk.init(
        dsn=_sentry.dsn,
        integrations=[
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        traces_sample_rate=0.0,
        environment=_sentry.environment or "prod",
        release=__version__,
    )
else:
    logging.getLogger(__name__).debug("Sentry DSN not set; Sentry disabled")
