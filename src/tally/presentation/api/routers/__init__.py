from tally.presentation.api.routers.analytics import router as analytics_router

__all__ = ["analytics_router"]
