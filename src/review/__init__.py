from review.session import ReviewSession, count_call_sites

__all__ = ["ReviewSession", "count_call_sites"]
