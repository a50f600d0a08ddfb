class CheckoutError(Exception):
    """Base class for failures a collaborator reports back to the checkout."""
