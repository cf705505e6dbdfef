"""Reusable CDK Constructs."""

from .lambda_function import LambdaFunction, runtime_from_name

__all__ = [
    "LambdaFunction",
    "runtime_from_name",
]
