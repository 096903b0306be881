from ideagraph.utils.retry import RetryConfig, RetryResult, retry_with_result

__all__ = [
    "RetryConfig",
    "RetryResult",
    "retry_with_result",
]
