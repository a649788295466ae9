# wrapntrack/storefront/order_flow.py
"""
Curated gift-box ordering.

A customer fills in the order form, picks a style (or hand-picks items
per category), and submits. Submission assembles a DraftOrder, holds it
and mails an OTP; the order is only POSTed once the code verifies.

    DRAFTING --submit--> PENDING_OTP --confirm(ok)--> PERSISTED
        ^                    |
        +------cancel--------+

Only one draft is pending at a time; submitting again replaces it.
"""
import enum
import logging
from datetime import date
from typing import Any

from pydantic import BaseModel, Field

from wrapntrack.storefront.api_client import ApiClient, ApiError
from wrapntrack.storefront.catalog import CATEGORIES, Catalog
from wrapntrack.storefront.otp_gate import OtpGate, OtpOutcome, OtpResult
from wrapntrack.storefront.session import SessionManager

logger = logging.getLogger(__name__)

NO_PRODUCTS_MESSAGE = "No products selected or available."
REQUIRED_FIELDS = {
    "name": "Name is required",
    "email": "Email is required",
    "contact": "Contact number is required",
    "shipping_location": "Shipping location is required",
    "event_date": "Event date is required",
}


class FlowState(str, enum.Enum):
    DRAFTING = "drafting"
    PENDING_OTP = "pending_otp"
    PERSISTED = "persisted"


class SelectedProduct(BaseModel):
    name: str
    sku: str | None = None


class CustomProduct(BaseModel):
    """A "use my own product" entry; it usually has no SKU."""

    name: str
    description: str | None = None


class OrderForm(BaseModel):
    """
    Raw form input. Numbers and dates may still be strings here;
    validate() decides whether they are acceptable.
    """

    name: str = ""
    email: str = ""
    contact: str = ""
    shipping_location: str = ""
    event_date: date | str | None = None
    order_quantity: int | float | str | None = 1
    budget: float | str | None = None
    special_instructions: str = ""
    style: str | None = None
    selections: dict[str, list[SelectedProduct]] = Field(default_factory=dict)
    custom_products: list[CustomProduct] = Field(default_factory=list)


class OrderProductLine(BaseModel):
    sku: str
    quantity: int


class DraftOrder(BaseModel):
    name: str
    email_address: str
    telephone: str | None = None
    shipping_address: str
    expected_delivery: date
    package_name: str
    remarks: str | None = None
    budget: float | None = None
    order_quantity: int = 1
    products: list[OrderProductLine]

    def payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class SubmitOutcome(str, enum.Enum):
    VALIDATION_FAILED = "validation_failed"
    NO_PRODUCTS = "no_products"
    PENDING_OTP = "pending_otp"


class SubmitResult(BaseModel):
    outcome: SubmitOutcome
    message: str
    errors: dict[str, str] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    otp: OtpResult | None = None


class ConfirmOutcome(str, enum.Enum):
    PLACED = "placed"
    VERIFICATION_FAILED = "verification_failed"
    NEW_CODE_REQUIRED = "new_code_required"
    NO_PENDING_ORDER = "no_pending_order"
    ORDER_FAILED = "order_failed"
    SESSION_EXPIRED = "session_expired"


class ConfirmResult(BaseModel):
    outcome: ConfirmOutcome
    message: str
    order: dict[str, Any] | None = None
    otp: OtpResult | None = None


def _parse_positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() and value > 0 else None
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _parse_budget(value: Any) -> float | None:
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return None


def _parse_date(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def validate(form: OrderForm) -> dict[str, str]:
    """Field name -> message. Empty when the form can be submitted."""
    errors: dict[str, str] = {}

    for field, message in REQUIRED_FIELDS.items():
        value = getattr(form, field)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors[field] = message

    if "event_date" not in errors and _parse_date(form.event_date) is None:
        errors["event_date"] = "Event date must be a valid date"

    if _parse_positive_int(form.order_quantity) is None:
        errors["order_quantity"] = "Order quantity must be a positive whole number"

    if form.budget not in (None, ""):
        budget = _parse_budget(form.budget)
        if budget is None or budget < 0:
            errors["budget"] = "Budget cannot be negative"

    return errors


class OrderSubmissionFlow:
    """
    One gift-box order attempt, from form to persisted order.

    The flow owns the OTP gate (and through it the resend cooldown);
    close() tears the cooldown down. Use it as a context manager to
    scope that lifetime to a screen.
    """

    def __init__(
        self,
        api: ApiClient,
        catalog: Catalog,
        session: SessionManager,
        gate: OtpGate | None = None,
        per_category: int = 3,
    ):
        self.api = api
        self.catalog = catalog
        self.session = session
        self.gate = gate or OtpGate(api)
        self.per_category = per_category
        self.state = FlowState.DRAFTING
        self.pending: DraftOrder | None = None
        self.code_consumed = False

    def __enter__(self) -> "OrderSubmissionFlow":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def prepare(self) -> bool:
        """Load the catalog if it has not been loaded yet."""
        if self.catalog.loaded:
            return True
        return self.catalog.load()

    # ---- assembly ----

    def _candidates(self, form: OrderForm) -> list[tuple[str, str | None]]:
        if form.style:
            style_products = self.catalog.get_style_products(form.style, self.per_category)
            if style_products:
                return [(p.name, p.sku) for p in style_products]
            logger.info("Style %r has no curated products, using manual picks", form.style)

        picks: list[tuple[str, str | None]] = []
        ordered = CATEGORIES + [c for c in form.selections if c not in CATEGORIES]
        for category in ordered:
            for product in form.selections.get(category, []):
                picks.append((product.name, product.sku))
        for custom in form.custom_products:
            picks.append((custom.name, None))
        return picks

    def assemble(self, form: OrderForm) -> tuple[DraftOrder | None, list[str]]:
        """
        Resolve the form into a draft.

        Returns (draft, warnings). Unresolvable products are dropped and
        named in warnings; lines are de-duplicated by SKU, first wins.
        The draft has no products when nothing resolved.
        """
        warnings: list[str] = []
        quantity = _parse_positive_int(form.order_quantity) or 1
        lines: dict[str, OrderProductLine] = {}

        for name, sku in self._candidates(form):
            resolved = (sku and self.catalog.resolve_sku(sku)) or self.catalog.resolve_sku(name)
            if not resolved:
                warnings.append(f"Product not found in inventory: {name}")
                continue
            lines.setdefault(resolved, OrderProductLine(sku=resolved, quantity=quantity))

        event_date = _parse_date(form.event_date)
        if event_date is None:
            return None, warnings

        budget = _parse_budget(form.budget) if form.budget not in (None, "") else None
        draft = DraftOrder(
            name=form.name.strip(),
            email_address=form.email.strip(),
            telephone=form.contact.strip() or None,
            shipping_address=form.shipping_location.strip(),
            expected_delivery=event_date,
            package_name=form.style or "custom",
            remarks=form.special_instructions.strip() or None,
            budget=budget,
            order_quantity=quantity,
            products=list(lines.values()),
        )
        return draft, warnings

    # ---- transitions ----

    def submit(self, form: OrderForm) -> SubmitResult:
        """
        Validate, assemble and hold the draft, then mail an OTP to the
        customer's on-file email. No request is made unless the form
        is valid and at least one product resolved.
        """
        errors = validate(form)
        if errors:
            return SubmitResult(
                outcome=SubmitOutcome.VALIDATION_FAILED,
                message="Please fix the highlighted fields.",
                errors=errors,
            )

        draft, warnings = self.assemble(form)
        if draft is None or not draft.products:
            return SubmitResult(
                outcome=SubmitOutcome.NO_PRODUCTS,
                message=NO_PRODUCTS_MESSAGE,
                warnings=warnings,
            )

        self.pending = draft
        self.state = FlowState.PENDING_OTP
        self.code_consumed = False

        otp = self.gate.send_otp(self.session.email)
        return SubmitResult(
            outcome=SubmitOutcome.PENDING_OTP,
            message=otp.message,
            warnings=warnings,
            otp=otp,
        )

    def resend(self) -> OtpResult:
        if self.state is not FlowState.PENDING_OTP:
            return OtpResult(outcome=OtpOutcome.BAD_REQUEST, message="No order awaiting confirmation.")
        if self.session.email:
            self.gate.email = self.session.email
        result = self.gate.resend_otp()
        if result.outcome is OtpOutcome.SENT:
            self.code_consumed = False
        return result

    def confirm(self, code: str) -> ConfirmResult:
        """
        Verify the code, then POST the pending draft. The order request
        is never made when verification fails.
        """
        if self.state is not FlowState.PENDING_OTP or self.pending is None:
            return ConfirmResult(
                outcome=ConfirmOutcome.NO_PENDING_ORDER,
                message="No order awaiting confirmation.",
            )
        if self.code_consumed:
            return ConfirmResult(
                outcome=ConfirmOutcome.NEW_CODE_REQUIRED,
                message="That code has already been used. Please request a new code.",
            )

        draft = self.pending
        otp, placed = self.gate.confirm(self.session.email, code, lambda: self._place(draft))
        if not otp.success:
            return ConfirmResult(
                outcome=ConfirmOutcome.VERIFICATION_FAILED,
                message=otp.message,
                otp=otp,
            )
        placed.otp = otp
        return placed

    def _place(self, draft: DraftOrder) -> ConfirmResult:
        try:
            order = self.api.post("/api/orders", json=draft.payload())
        except ApiError as exc:
            if exc.status_code in (401, 403):
                logger.warning("Session rejected while placing order, signing out")
                self.session.clear_auth()
                self._reset()
                return ConfirmResult(
                    outcome=ConfirmOutcome.SESSION_EXPIRED,
                    message="Your session has expired. Please log in again.",
                )
            # The code was consumed by the successful verify.
            self.code_consumed = True
            return ConfirmResult(
                outcome=ConfirmOutcome.ORDER_FAILED,
                message=exc.message or "Failed to place order. Please try again.",
            )

        logger.info("Order %s placed", order.get("order_id"))
        self.pending = None
        self.state = FlowState.PERSISTED
        self.gate.cooldown.cancel()
        return ConfirmResult(
            outcome=ConfirmOutcome.PLACED,
            message="Order placed successfully",
            order=order,
        )

    def _reset(self) -> None:
        self.pending = None
        self.code_consumed = False
        self.state = FlowState.DRAFTING

    def cancel(self) -> None:
        """Close the confirmation step and discard the pending draft."""
        self._reset()

    def close(self) -> None:
        self._reset()
        self.gate.close()
