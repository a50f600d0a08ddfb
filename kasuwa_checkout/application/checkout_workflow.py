"""Step sequencer for the storefront checkout.

Walks the shopper through ``CartReview -> Shipping -> Payment -> Confirmation``.
Each forward transition is gated on a validation predicate; backward moves are
always allowed and keep whatever was already selected. Collaborator failures
are caught at the operation boundary and surfaced through ``error``.
"""

import asyncio
from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from loguru import logger
from pydantic import ValidationError

from kasuwa_checkout.domain.address import Address, AddressForm
from kasuwa_checkout.domain.cart import Cart
from kasuwa_checkout.domain.errors import CheckoutError
from kasuwa_checkout.domain.interfaces import (
    IAddressClient,
    IAuthContext,
    ICartClient,
    IOrderClient,
)
from kasuwa_checkout.domain.order import (
    BillingSelection,
    DistinctBilling,
    OrderDraft,
    PlacedOrder,
    SameAsShipping,
)
from kasuwa_checkout.domain.payment import PaymentMethod
from kasuwa_checkout.domain.pricing import PricingPolicy, Totals, compute_totals
from kasuwa_checkout.domain.steps import CheckoutStep


class LoadStatus(StrEnum):
    READY = "ready"
    LOGIN_REQUIRED = "login_required"  # caller should send the shopper to login
    CART_EMPTY = "cart_empty"  # caller should leave checkout for the cart page
    FAILED = "failed"  # ``error`` is set; call load_checkout_data() again to retry
    IN_PROGRESS = "in_progress"  # another load is still running; nothing changed


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err["loc"])
        parts.append(f"{field}: {err['msg']}" if field else err["msg"])
    return "; ".join(parts)


class CheckoutWorkflow:
    """Coordinates cart review, address and payment selection, and order placement."""

    def __init__(
        self,
        auth: IAuthContext,
        carts: ICartClient,
        addresses: IAddressClient,
        orders: IOrderClient,
        pricing: PricingPolicy | None = None,
    ) -> None:
        self._auth = auth
        self._carts = carts
        self._addresses = addresses
        self._orders = orders
        self._pricing = pricing or PricingPolicy()

        self.step: CheckoutStep = CheckoutStep.CART_REVIEW
        self.cart: Cart | None = None
        self.addresses: list[Address] = []
        self.shipping_address: Address | None = None
        self.billing: BillingSelection = SameAsShipping()
        self.payment_method: PaymentMethod | None = PaymentMethod.CARD
        self.notes: str = ""
        self.placed_order: PlacedOrder | None = None

        self.error: str | None = None
        self.address_form_open = False

        # Busy flags; the matching operation is a no-op while one is set
        self.loading = False
        self.saving = False
        self.processing = False

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def totals(self) -> Totals:
        """Totals for the current cart, recomputed on every access."""
        if self.cart is None:
            return Totals.zero()
        return compute_totals(self.cart.total_amount, self._pricing)

    @property
    def use_same_address(self) -> bool:
        return isinstance(self.billing, SameAsShipping)

    @property
    def billing_address(self) -> Address | None:
        if isinstance(self.billing, SameAsShipping):
            return self.shipping_address
        return self.billing.address

    @property
    def order_number(self) -> str | None:
        return self.placed_order.order_number if self.placed_order else None

    def step_progress(self) -> list[tuple[CheckoutStep, bool]]:
        """Return every step paired with whether it is already behind the shopper."""
        return [(step, step.position < self.step.position) for step in CheckoutStep]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_checkout_data(self) -> LoadStatus:
        """Fetch the cart and saved addresses concurrently.

        Both fetches must succeed. The default address, if any, is
        pre-selected for shipping unless an earlier selection still exists.
        An empty cart drops whatever cart was loaded before.
        """
        if not self._auth.is_authenticated:
            logger.info("Checkout requires a signed-in shopper, redirecting to login")
            return LoadStatus.LOGIN_REQUIRED

        if self.loading:
            logger.debug("Checkout data already loading, ignoring")
            return LoadStatus.IN_PROGRESS

        self.loading = True
        self.error = None
        try:
            # Collect both outcomes; one failure does not cancel the other fetch
            results = await asyncio.gather(
                self._carts.get_cart(),
                self._addresses.get_addresses(),
                return_exceptions=True,
            )
        finally:
            self.loading = False

        failures = [r for r in results if isinstance(r, BaseException)]
        for exc in failures:
            if not isinstance(exc, CheckoutError):
                raise exc
        if failures:
            for extra in failures[1:]:
                logger.warning(f"Also failed while loading checkout data: {extra}")
            self._report_failure(failures[0], "Failed to load checkout data")
            return LoadStatus.FAILED

        cart, addresses = results
        if cart.is_empty:
            logger.info("Cart is empty, leaving checkout")
            self.cart = None
            return LoadStatus.CART_EMPTY

        self.cart = cart
        self.addresses = list(addresses)
        self._reconcile_selections()

        user = self._auth.current_user
        logger.info(
            f"Checkout ready for {user.id if user else 'unknown user'}: "
            f"{cart.total_items} item(s), {len(self.addresses)} saved address(es)"
        )
        return LoadStatus.READY

    def _reconcile_selections(self) -> None:
        known = {a.id: a for a in self.addresses}

        if self.shipping_address is not None:
            self.shipping_address = known.get(self.shipping_address.id)
        if self.shipping_address is None:
            self.shipping_address = next(
                (a for a in self.addresses if a.is_default), None
            )

        if isinstance(self.billing, DistinctBilling) and self.billing.address:
            self.billing = DistinctBilling(address=known.get(self.billing.address.id))

    # ------------------------------------------------------------------
    # Step transitions
    # ------------------------------------------------------------------

    def continue_to_shipping(self) -> bool:
        if self.step is CheckoutStep.CONFIRMATION:
            return False
        if not self._check_cart():
            return False
        self._move_to(CheckoutStep.SHIPPING)
        return True

    def continue_to_payment(self) -> bool:
        if self.step is CheckoutStep.CONFIRMATION:
            return False
        if not (self._check_cart() and self._check_addresses()):
            return False
        self._move_to(CheckoutStep.PAYMENT)
        return True

    def go_to(self, step: CheckoutStep) -> bool:
        """Navigate from the step indicator.

        Moving back is always allowed. Moving forward runs the same guards as
        the continue buttons. Confirmation is neither entered nor left here.
        """
        if self.step is CheckoutStep.CONFIRMATION or step is CheckoutStep.CONFIRMATION:
            return step is self.step

        if step.position <= self.step.position:
            self._move_to(step)
            return True

        if self.step is CheckoutStep.CART_REVIEW and not self.continue_to_shipping():
            return False
        if step is CheckoutStep.PAYMENT:
            return self.continue_to_payment()
        return self.step is step

    def _move_to(self, step: CheckoutStep) -> None:
        if step is not self.step:
            logger.info(f"Checkout step: {self.step.label} -> {step.label}")
        self.step = step
        self.error = None

    def _check_cart(self) -> bool:
        if self.cart is None or self.cart.is_empty:
            return self._reject("Your cart is empty")
        return True

    def _check_addresses(self) -> bool:
        return self._selected_addresses() is not None

    def _selected_addresses(self) -> tuple[Address, Address] | None:
        shipping, billing = self.shipping_address, self.billing_address
        if shipping is None:
            self._reject("Please select a shipping address")
            return None
        if billing is None:
            self._reject("Please select a billing address")
            return None
        return shipping, billing

    # ------------------------------------------------------------------
    # Selections
    # ------------------------------------------------------------------

    def select_shipping_address(self, address_id: int) -> bool:
        address = self._find_address(address_id)
        if address is None:
            return False
        self.shipping_address = address
        return True

    def select_billing_address(self, address_id: int) -> bool:
        """Bill to ``address_id``; this switches off "same as shipping"."""
        address = self._find_address(address_id)
        if address is None:
            return False
        self.billing = DistinctBilling(address=address)
        return True

    def set_use_same_address(self, same: bool) -> None:
        if same:
            self.billing = SameAsShipping()
        elif isinstance(self.billing, SameAsShipping):
            self.billing = DistinctBilling()

    def select_payment_method(self, method: PaymentMethod | str) -> bool:
        try:
            self.payment_method = PaymentMethod(method)
        except ValueError:
            return self._reject(f"Unsupported payment method: {method}")
        return True

    def set_notes(self, notes: str) -> None:
        self.notes = notes.strip()

    def open_address_form(self) -> None:
        self.address_form_open = True

    def close_address_form(self) -> None:
        self.address_form_open = False

    def dismiss_error(self) -> None:
        self.error = None

    def _find_address(self, address_id: int) -> Address | None:
        address = next((a for a in self.addresses if a.id == address_id), None)
        if address is None:
            self._reject(f"Address {address_id} is not one of your saved addresses")
        return address

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    async def add_address(
        self, fields: AddressForm | Mapping[str, Any]
    ) -> Address | None:
        """Create a new address and select it for shipping.

        Returns ``None`` on validation or API failure (the form stays open),
        or when a previous submission is still in flight.
        """
        if self.saving:
            logger.debug("Address submission already in flight, ignoring")
            return None

        try:
            form = (
                fields
                if isinstance(fields, AddressForm)
                else AddressForm.model_validate(dict(fields))
            )
        except ValidationError as exc:
            self._reject(_describe_validation_error(exc))
            return None

        self.saving = True
        self.error = None
        try:
            address = await self._addresses.create_address(form)
        except CheckoutError as exc:
            self._report_failure(exc, "Failed to add address")
            return None
        finally:
            self.saving = False

        self.addresses.append(address)
        self.shipping_address = address
        self.address_form_open = False
        return address

    async def place_order(self) -> PlacedOrder | None:
        """Submit the order built from the current selections.

        On success the workflow moves to Confirmation and the cart is cleared
        best-effort. On failure it stays on Payment with ``error`` set.
        Returns ``None`` if a submission is already in flight.
        """
        if self.processing:
            logger.debug("Order submission already in flight, ignoring")
            return None
        if self.placed_order is not None:
            return self.placed_order

        if self.step is not CheckoutStep.PAYMENT:
            self._reject("Complete the shipping step before placing your order")
            return None
        draft = self._build_draft()
        if draft is None:
            return None

        self.processing = True
        self.error = None
        try:
            try:
                placed = await self._orders.create_order(draft)
            except CheckoutError as exc:
                self._report_failure(exc, "Failed to place order")
                return None

            self.placed_order = placed
            self._move_to(CheckoutStep.CONFIRMATION)
            logger.info(
                f"Order {placed.order_number} placed: "
                f"{self.payment_method}, total {self.totals.total}"
            )

            await self._clear_cart_quietly()
            return placed
        finally:
            self.processing = False

    def _build_draft(self) -> OrderDraft | None:
        if not self._check_cart():
            return None
        selected = self._selected_addresses()
        if selected is None:
            return None
        if self.payment_method is None:
            self._reject("Payment method is required")
            return None

        shipping, billing = selected
        return OrderDraft(
            shipping_address_id=shipping.id,
            billing_address_id=billing.id,
            payment_method=self.payment_method,
            notes=self.notes,
        )

    async def _clear_cart_quietly(self) -> None:
        # Any failure is logged only; the order stands
        try:
            await self._carts.clear_cart()
        except Exception as exc:
            logger.warning(f"Order placed but clearing the cart failed: {exc}")

    # ------------------------------------------------------------------
    # Error reporting
    # ------------------------------------------------------------------

    def _reject(self, message: str) -> bool:
        logger.info(f"Checkout blocked on {self.step.label}: {message}")
        self.error = message
        return False

    def _report_failure(self, exc: CheckoutError, fallback: str) -> None:
        message = str(exc) or fallback
        logger.warning(f"{fallback}: {message}")
        self.error = message
