from loguru import logger

from kasuwa_checkout.application.checkout_workflow import CheckoutWorkflow, LoadStatus
from kasuwa_checkout.domain.address import AddressForm
from kasuwa_checkout.domain.order import PlacedOrder
from kasuwa_checkout.domain.payment import PaymentMethod, get_payment_option
from kasuwa_checkout.domain.pricing import format_price


class CheckoutExecutor:
    """Drives one checkout end to end without a shopper at the keyboard."""

    def __init__(self, workflow: CheckoutWorkflow) -> None:
        self._workflow = workflow

    async def run(
        self,
        payment_method: PaymentMethod = PaymentMethod.CARD,
        new_address: AddressForm | None = None,
        notes: str = "",
    ) -> PlacedOrder | None:
        """Walk every step and return the placed order, or ``None`` if a step failed.

        ``new_address`` is created and used for shipping when no saved
        address is pre-selected.
        """
        wf = self._workflow

        status = await wf.load_checkout_data()
        if status is not LoadStatus.READY:
            logger.warning(f"Checkout not started: {status} ({wf.error or 'no error'})")
            return None

        for item in wf.cart.items if wf.cart else []:
            logger.debug(
                f"{item.product_name} x{item.quantity} @ {format_price(item.unit_price)}"
                f" = {format_price(item.total_price)}"
            )
        totals = wf.totals
        logger.info(
            f"Subtotal {format_price(totals.subtotal)} | "
            f"Shipping {'Free' if totals.free_shipping else format_price(totals.shipping)} | "
            f"VAT {format_price(totals.tax)} | Total {format_price(totals.total)}"
        )

        if not wf.continue_to_shipping():
            return self._abort()

        if wf.shipping_address is None and new_address is not None:
            wf.open_address_form()
            if await wf.add_address(new_address) is None:
                return self._abort()

        if not wf.continue_to_payment():
            return self._abort()

        if not wf.select_payment_method(payment_method):
            return self._abort()
        wf.set_notes(notes)
        option = get_payment_option(payment_method)
        logger.info(
            f"Paying by {option.display_name} via {option.provider_name}; "
            f"shipping to {wf.shipping_address.one_line() if wf.shipping_address else '?'}"
        )

        placed = await wf.place_order()
        if placed is None:
            return self._abort()

        logger.info(
            f"Confirmation: order {placed.order_number} for {format_price(totals.total)}"
        )
        return placed

    def _abort(self) -> None:
        logger.warning(
            f"Checkout stopped at {self._workflow.step.label}: {self._workflow.error}"
        )
        return None
