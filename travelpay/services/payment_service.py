"""
Payment orchestration: create payment intents and confirm them.

Creation: idempotency reservation -> authoritative total -> minimum charge
-> gateway routing -> gateway call -> record.
Confirmation: gateway status -> fresh total -> exact smallest-unit and
currency comparison -> booking record.
"""
import uuid
from typing import Any, Dict, List, Mapping, Optional

import structlog

from travelpay.currency import MIN_CHARGE_SMALLEST_UNIT, from_smallest_unit, to_smallest_unit
from travelpay.errors import AmountTooSmall, PaymentNotFound, SignatureVerificationFailed
from travelpay.models import (
    BookingConfirmation,
    BookingIntent,
    ComputedTotal,
    ConfirmationResult,
    GatewayEvent,
    IntentRef,
    PaymentCreationResult,
    PaymentIntent,
    PaymentMethodInfo,
    PaymentStatus,
)
from travelpay.psp.dispatcher import GatewayRouter
from travelpay.storage import BookingStore, PaymentIntentStore
from .idempotency import IdempotencyLedger
from .pricing_service import PriceCalculator

logger = structlog.get_logger(__name__)

AMOUNT_MISMATCH = "AMOUNT_MISMATCH"
CURRENCY_MISMATCH = "CURRENCY_MISMATCH"


def booking_metadata(intent: BookingIntent, total: ComputedTotal, method: str) -> Dict[str, Any]:
    """Audit trail attached to the gateway payment, built from server-side data only."""
    return {
        "destination": intent.destination,
        "travelers": intent.travelers,
        "start_date": intent.date_range.start_date,
        "end_date": intent.date_range.end_date,
        "outbound_flight_id": intent.flight_refs.outbound_id,
        "return_flight_id": intent.flight_refs.return_id,
        "hotels": ",".join(f"{h.id}x{h.nights}" for h in intent.hotel_refs) or None,
        "activities": ",".join(intent.activity_refs) or None,
        "flights_subtotal": str(total.flights_subtotal),
        "hotels_subtotal": str(total.hotels_subtotal),
        "activities_subtotal": str(total.activities_subtotal),
        "computed_amount": str(total.amount),
        "currency": total.currency,
        "payment_method": method,
    }


def _mismatch_code(amount_minor: int, currency: str, total: ComputedTotal) -> Optional[str]:
    if currency.upper() != total.currency:
        return CURRENCY_MISMATCH
    if amount_minor != to_smallest_unit(total.amount, total.currency):
        return AMOUNT_MISMATCH
    return None


class PaymentOrchestrator:
    def __init__(
        self,
        calculator: PriceCalculator,
        router: GatewayRouter,
        ledger: IdempotencyLedger,
        intents: Optional[PaymentIntentStore] = None,
        bookings: Optional[BookingStore] = None,
    ):
        self.calculator = calculator
        self.router = router
        self.ledger = ledger
        self.intents = intents or PaymentIntentStore()
        self.bookings = bookings or BookingStore()

    def available_methods(self) -> List[PaymentMethodInfo]:
        return self.router.available_methods()

    async def create_payment(self, intent: BookingIntent, method: str, idempotency_key: str) -> PaymentCreationResult:
        """
        Create a payment intent for a booking, at most once per key.

        Args:
            intent: Canonical booking intent
            method: Payment method key
            idempotency_key: Client token scoping this payment attempt

        Returns:
            PaymentCreationResult; ``is_existing`` is True on replay

        Raises:
            IdempotencyInProgress: the same key is being processed right now
            PaymentError: validation, routing or gateway failure
        """
        existing = await self.ledger.check_or_reserve(idempotency_key, method)
        if existing is not None:
            logger.info("payment_intent_replayed", payment_intent_id=existing.intent_id, gateway=existing.gateway.value)
            return self._creation_result(await self._load_intent(existing), is_existing=True)

        try:
            total = self.calculator.compute_total(intent)
            amount_minor = to_smallest_unit(total.amount, total.currency)
            if amount_minor < MIN_CHARGE_SMALLEST_UNIT:
                raise AmountTooSmall(
                    f"Amount {total.amount} {total.currency} is below the minimum charge",
                    amount_minor=amount_minor,
                )
            adapter = self.router.select_gateway(method)
            created = await adapter.create_payment(
                amount_minor,
                total.currency,
                method,
                booking_metadata(intent, total, method),
                idempotency_key=idempotency_key,
            )
        except BaseException:
            await self.ledger.release(idempotency_key, method)
            raise

        self.intents.save(created)
        await self.ledger.record(idempotency_key, method, created.ref)
        logger.info(
            "payment_intent_created",
            payment_intent_id=created.id,
            gateway=created.gateway.value,
            amount=amount_minor,
            currency=total.currency,
            method=method,
        )
        return self._creation_result(created, is_existing=False)

    async def _load_intent(self, ref: IntentRef) -> PaymentIntent:
        stored = self.intents.get(ref)
        if stored is not None:
            return stored
        # Recorded by another process: ask the gateway.
        refreshed = await self.router.get(ref.gateway.value).confirm_payment(ref.intent_id)
        if refreshed.inconclusive:
            raise PaymentNotFound(f"Payment intent {ref} could not be reloaded")
        return self.intents.save(refreshed)

    @staticmethod
    def _creation_result(intent: PaymentIntent, is_existing: bool) -> PaymentCreationResult:
        return PaymentCreationResult(
            payment_intent_id=intent.id,
            gateway=intent.gateway,
            computed_amount=from_smallest_unit(intent.amount_minor, intent.currency),
            currency=intent.currency,
            amount_minor=intent.amount_minor,
            is_existing=is_existing,
            client_secret=intent.client_secret,
            redirect_url=intent.redirect_url,
            qr_code=intent.qr_code,
        )

    async def confirm_payment(self, payment_id: str, gateway_name: str, intent: BookingIntent) -> ConfirmationResult:
        """
        Verify a payment against a fresh recomputation and book it.

        A mismatch in amount or currency is terminal for the attempt: the
        client has to start a new payment with a new idempotency key.
        """
        adapter = self.router.get(gateway_name)
        ref = IntentRef(adapter.name, payment_id)

        booked = self.bookings.get(ref)
        if booked is not None:
            total = self.calculator.compute_total(intent)
            code = _mismatch_code(booked.amount_minor, booked.currency, total)
            if code is not None:
                logger.critical(
                    "booking_total_mismatch",
                    code=code,
                    payment_intent_id=payment_id,
                    gateway=adapter.name.value,
                    booking_id=booked.id,
                    booked_amount=booked.amount_minor,
                    booked_currency=booked.currency,
                    expected_currency=total.currency,
                )
                return ConfirmationResult(
                    success=False,
                    status=PaymentStatus.COMPLETED,
                    code=code,
                    message="Charged amount does not match the booking total",
                )
            return ConfirmationResult(success=True, status=PaymentStatus.COMPLETED, booking=booked)

        try:
            settled = await adapter.confirm_payment(payment_id)
        except SignatureVerificationFailed as e:
            logger.critical("payment_status_rejected", payment_intent_id=payment_id, gateway=adapter.name.value, error=e.message)
            return ConfirmationResult(
                success=False, status=PaymentStatus.FAILED, code=e.code, message=e.message
            )

        if not settled.inconclusive:
            self.intents.update_status(ref, settled.status)
        if settled.status != PaymentStatus.COMPLETED:
            logger.info(
                "payment_not_completed",
                payment_intent_id=payment_id,
                status=settled.status.value,
                inconclusive=settled.inconclusive,
            )
            return ConfirmationResult(success=False, status=settled.status, inconclusive=settled.inconclusive)

        total = self.calculator.compute_total(intent)
        expected_minor = to_smallest_unit(total.amount, total.currency)

        code = _mismatch_code(settled.amount_minor, settled.currency, total)
        if code is not None:
            logger.critical(
                "payment_amount_mismatch",
                code=code,
                payment_intent_id=payment_id,
                gateway=adapter.name.value,
                charged_amount=settled.amount_minor,
                charged_currency=settled.currency,
                expected_amount=expected_minor,
                expected_currency=total.currency,
            )
            return ConfirmationResult(
                success=False,
                status=settled.status,
                code=code,
                message="Charged amount does not match the booking total",
            )

        booking = BookingConfirmation(
            id=f"BK-{uuid.uuid4().hex[:10].upper()}",
            payment_intent_id=payment_id,
            gateway=adapter.name,
            destination=intent.destination,
            travelers=intent.travelers,
            start_date=intent.date_range.start_date,
            end_date=intent.date_range.end_date,
            total_amount=total.amount,
            amount_minor=expected_minor,
            currency=total.currency,
            flight_total=total.flights_subtotal,
            hotel_total=total.hotels_subtotal,
            activity_total=total.activities_subtotal,
        )
        self.bookings.save(ref, booking)
        logger.info(
            "booking_confirmed",
            booking_id=booking.id,
            payment_intent_id=payment_id,
            gateway=adapter.name.value,
            amount=expected_minor,
            currency=total.currency,
        )
        return ConfirmationResult(success=True, status=PaymentStatus.COMPLETED, booking=booking)

    def handle_callback(self, gateway_name: str, body: bytes, headers: Mapping[str, str]) -> Optional[GatewayEvent]:
        """
        Verify an inbound gateway notification and record its status.

        Returns None when the notification is dropped. Callbacks never
        create bookings; that only happens through confirmation.
        """
        adapter = self.router.get(gateway_name)
        try:
            event = adapter.verify_callback(body, headers)
        except SignatureVerificationFailed as e:
            logger.warning("callback_signature_invalid", gateway=adapter.name.value, error=e.message, **e.context)
            return None

        intent = self.intents.update_status(IntentRef(event.gateway, event.payment_id), event.status)
        logger.info(
            "callback_received",
            gateway=event.gateway.value,
            payment_intent_id=event.payment_id,
            event_type=event.event_type,
            status=event.status.value,
            known_intent=intent is not None,
        )
        return event
