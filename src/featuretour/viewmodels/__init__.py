from .tour_viewmodel import TourViewModel  # noqa: F401

__all__ = ["TourViewModel"]
