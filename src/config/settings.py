"""Runtime settings for the supply-chain contracts.

Values are read from the environment (or a ``.env`` file) through
python-decouple.  Importing this module also configures structlog on
top of stdlib logging.
"""

import logging.config
import re

import structlog
from decouple import config

LOG_LEVEL = config("LOG_LEVEL", default="INFO").upper()

# ---------------------------------------------------------------------------
# Ledger topology
# ---------------------------------------------------------------------------
ORDER_COLLECTION_NAME = config("ORDER_COLLECTION_NAME", default="OrderCollection")

# "strict": wholesaler only, product must be "Transferred to Wholesaler".
# "open": no affiliation check and no status precondition.
MATCH_POLICY = config("MATCH_POLICY", default="strict").lower()

MSP_IDS = {
    "manufacturer": config("MANUFACTURER_MSP_ID", default="manufacturerMSP"),
    "distributer": config("DISTRIBUTER_MSP_ID", default="distributerMSP"),
    "wholesaler": config("WHOLESALER_MSP_ID", default="wholesalerMSP"),
    "market": config("MARKET_MSP_ID", default="marketMSP"),
}

# ---------------------------------------------------------------------------
# Structured Logging (structlog + stdlib logging)
# ---------------------------------------------------------------------------
# Order content lives in a private collection; it must not leak into peer logs.
PRIVATE_FIELDS = frozenset({"price", "distributerName", "distributer_name", "transient"})

SENSITIVE_PATTERN = re.compile(
    r"(password|passwd|secret|token|authorization|private_key)"
    r"""([=:]\s*["']?)([^\s,}"']+)""",
    re.IGNORECASE,
)

MASK = "***MASKED***"


def mask_private_fields(_, __, event_dict):
    """Processor that masks private order fields and secrets in log values."""
    for key, value in list(event_dict.items()):
        if key in PRIVATE_FIELDS:
            event_dict[key] = MASK
        elif isinstance(value, str):
            event_dict[key] = SENSITIVE_PATTERN.sub(MASK, value)
    return event_dict


# Shared processors used by both structlog and stdlib logging
_shared_processors = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    mask_private_fields,
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": structlog.stdlib.ProcessorFormatter,
            "processors": [
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            "foreign_pre_chain": _shared_processors,
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
}


def configure_logging() -> None:
    logging.config.dictConfig(LOGGING)
    structlog.configure(
        processors=[
            *_shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


configure_logging()
