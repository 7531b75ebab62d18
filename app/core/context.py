# app/core/context.py

import contextvars

# Set per request by CorrelationIdMiddleware; read by the JSON log formatter.
correlation_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)
