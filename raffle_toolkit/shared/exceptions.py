"""
Exception hierarchy for the raffle toolkit.

Exception Categories:
- RetryableException: Transient failures that may succeed on retry (RPC, network)
- NonRetryableException: Permanent failures that won't benefit from retry
- ConfigurationException: Startup/config errors that prevent operation

Discovery-level conditions (the only ones that make a full fetch raise):
- ContractsNotAvailableException -> NonRetryableException (no registry on chain)
- AddressDiscoveryException -> RetryableException (registry read failed)
"""


class RetryableException(Exception):
    """
    Base class for exceptions that may succeed on retry.

    Use for transient failures like:
    - RPC timeouts
    - Rate limiting
    - Temporary network issues
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NonRetryableException(Exception):
    """
    Base class for exceptions that won't benefit from retry.

    Use for permanent failures like:
    - Unsupported chains
    - Missing contract deployments
    - Business rule violations
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationException(NonRetryableException):
    """
    Exception for configuration/startup errors.

    Use when:
    - An RPC URL cannot be resolved for a chain
    - Invalid configuration values
    - Missing ABI resources
    """

    pass


class ContractsNotAvailableException(NonRetryableException):
    """
    The active chain has no registered raffle registry contract.

    Callers should show "unable to load raffles on this network" rather
    than an empty list.
    """

    def __init__(self, chain_id: int):
        super().__init__(f"Raffle contracts not available on chain {chain_id}")
        self.chain_id = chain_id


class AddressDiscoveryException(RetryableException):
    """
    The registry contract could not be read.

    Means "no raffles available right now", never "zero raffles exist".
    """

    def __init__(self, chain_id: int, message: str):
        super().__init__(
            f"Raffle address discovery failed on chain {chain_id}: {message}"
        )
        self.chain_id = chain_id


class RaffleFetchException(RetryableException):
    """
    A required raffle field could not be read.

    Raised inside the detail fetcher and converted to a dropped raffle;
    it never escapes a full fetch.
    """

    def __init__(self, address: str, method: str, message: str):
        super().__init__(f"{method} failed for raffle {address}: {message}")
        self.address = address
        self.method = method
