"""examples/basic_usage.py - s3logger integration demo.

Configuration comes from the environment, for example::

    export S3_LOGGER_BUCKET=my-logs
    export S3_LOGGER_REGION=eu-west-1
    export S3_LOGGER_ACCESS_KEY_ID='$AWS_ACCESS_KEY_ID'
    export S3_LOGGER_SECRET_ACCESS_KEY='$AWS_SECRET_ACCESS_KEY'
    python examples/basic_usage.py

Without those variables install() returns None and the program runs with
console logging only.
"""

import logging

import s3logger

# ---------------------------------------------------------------------------
# Standard logger setup (no changes from what a developer already has)
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("app")

# ---------------------------------------------------------------------------
# s3logger integration: one line added to the existing setup
# ---------------------------------------------------------------------------
handler = s3logger.install()


def pay(user_id: int, amount: int) -> None:
    """Simulate a payment flow."""
    logger.info(f"Payment attempt: user_id={user_id}, amount={amount}")
    balance = 3_000

    if balance < amount:
        logger.error(f"Insufficient funds (balance={balance}, requested={amount})")
        raise ValueError(f"InsufficientFunds: balance={balance}, amount={amount}")

    logger.info("Payment successful")


if __name__ == "__main__":
    if handler is None:
        print("s3logger not configured; bucket export disabled")

    try:
        pay(user_id=101, amount=5_000)
    except ValueError:
        logger.warning("payment for user 101 rejected")

    # WARNING and ERROR lines are buffered; flush() writes them now instead of
    # waiting for the buffer to fill or for interpreter exit.
    if handler is not None:
        handler.flush()
