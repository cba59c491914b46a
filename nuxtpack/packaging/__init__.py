"""Deployable unit packaging."""

from .lambda_zip import PackagingLimitExceeded, create_lambda

__all__ = ["PackagingLimitExceeded", "create_lambda"]
