from src.services import (
    metrics_history_service,
    metrics_service,
    overview_service,
    validation_service,
)


__all__ = [
    "metrics_history_service",
    "metrics_service",
    "overview_service",
    "validation_service",
]
