"""Reactive scale-up for self-hosted GitHub Actions runners on EC2.

Each queued-job event delivered through SQS is evaluated once: the job is
checked for eligibility, re-verified against GitHub, the current fleet is
counted against the configured cap, and at most one runner is created.

Example usage:
    from scale_runners.handler import scale_up_handler

    response = scale_up_handler(sqs_event, lambda_context)
"""

__version__ = "0.1.0"
