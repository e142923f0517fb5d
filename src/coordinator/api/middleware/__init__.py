"""HTTP middleware for the coordinator service."""

from coordinator.api.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
