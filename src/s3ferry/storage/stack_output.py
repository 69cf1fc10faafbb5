"""Bucket name resolution from CloudFormation stack outputs."""

from __future__ import annotations

import logging
from typing import Any

from s3ferry.core.errors import StackOutputError

logger = logging.getLogger(__name__)


def resolve_stack_output(client: Any, stack_name: str | None, output_key: str) -> str:
    """Return the value of a stack output.

    Args:
        client: boto3 CloudFormation client.
        stack_name: Name of the deployed stack.
        output_key: OutputKey to look up.

    Raises:
        StackOutputError: If there is no stack name, the stack has no
            outputs, or the key is missing or empty.
    """
    if not stack_name:
        raise StackOutputError(output_key, stack_name, "stack name not found")

    response = client.describe_stacks(StackName=stack_name)
    stacks = response.get("Stacks") or []
    outputs = stacks[0].get("Outputs") if stacks else None
    if not outputs:
        raise StackOutputError(output_key, stack_name)

    for output in outputs:
        if output.get("OutputKey") == output_key and output.get("OutputValue"):
            logger.debug(f"Resolved {output_key} in {stack_name} to {output['OutputValue']}")
            return str(output["OutputValue"])

    raise StackOutputError(output_key, stack_name, "output key not found")
