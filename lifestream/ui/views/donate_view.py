"""Donate (Funding) Screen.

Collects an amount and card details and runs ``PaymentService.donate``.
Card fields are cleared as soon as the attempt finishes, whatever the
outcome.

**Thin UI Rule**: amount parsing, currency conversion and the payment
round-trips all live in ``PaymentService``.
"""

from __future__ import annotations

import customtkinter as ctk
from pydantic import ValidationError as PydanticValidationError

from lifestream.errors import LifeStreamError
from lifestream.logger import StructuredLogger
from lifestream.models.payment import CardDetails, DonationReceipt
from lifestream.models.service_models import ServiceResult
from lifestream.services.payment_service import PaymentService
from lifestream.ui.components.form_fields import (
    error_label,
    field_label,
    hide_message,
    labeled_entry,
    set_entry,
    show_message,
)
from lifestream.ui.module_frame import ModuleFrame
from lifestream.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    BUTTON_HEIGHT,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    FONT_BODY,
    FONT_BUTTON,
    FONT_SMALL,
    INPUT_BG,
    INPUT_BORDER,
    INPUT_HEIGHT,
    PADDING_MD,
    PADDING_SM,
    SUCCESS_TEXT,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

_FORM_WIDTH: int = 460


class DonateView(ModuleFrame):
    """Card payment form for platform donations."""

    def __init__(self, parent: ctk.CTkFrame, service: PaymentService, logger: StructuredLogger) -> None:
        super().__init__(parent, logger)
        self._service = service

        self._build_header("Support LifeStream")

        outer = ctk.CTkFrame(self, fg_color="transparent")
        outer.pack(fill="both", expand=True)
        card = ctk.CTkFrame(outer, fg_color=CONTENT_CARD_BG, corner_radius=16, width=_FORM_WIDTH)
        card.pack(pady=PADDING_MD)
        inner = ctk.CTkFrame(card, fg_color="transparent")
        inner.pack(fill="both", expand=True, padx=36, pady=28)

        ctk.CTkLabel(
            inner,
            text="Your donation keeps the platform running for donors and patients.",
            font=FONT_BODY,
            text_color=TEXT_SECONDARY,
            wraplength=_FORM_WIDTH - 60,
            justify="left",
        ).pack(fill="x", pady=(0, PADDING_MD))

        self._amount_entry = labeled_entry(inner, f"Amount ({service.currency})", "e.g. 25")
        self._amount_entry.bind("<KeyRelease>", lambda _event: self._update_preview())
        self._preview_label = ctk.CTkLabel(inner, text="", font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w")
        self._preview_label.pack(fill="x", pady=(0, PADDING_SM))

        self._card_entry = labeled_entry(inner, "Card number", "4242 4242 4242 4242")

        field_label(inner, "Expiry (MM / YYYY) and CVC")
        row = ctk.CTkFrame(inner, fg_color="transparent")
        row.pack(fill="x", pady=(0, PADDING_MD))
        self._month_entry = self._small_entry(row, "MM", 60)
        self._year_entry = self._small_entry(row, "YYYY", 80)
        self._cvc_entry = self._small_entry(row, "CVC", 70, show="*")

        self._donate_btn = ctk.CTkButton(
            inner,
            text="Donate",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            height=BUTTON_HEIGHT,
            corner_radius=CORNER_RADIUS,
            command=self._handle_donate,
        )
        self._donate_btn.pack(fill="x", pady=(0, PADDING_SM))
        self._error_label = error_label(inner, wraplength=_FORM_WIDTH - 60)
        self._receipt_label = ctk.CTkLabel(
            inner, text="", font=FONT_BODY, text_color=SUCCESS_TEXT, wraplength=_FORM_WIDTH - 60, justify="left",
        )

        if not service.is_available:
            self._donate_btn.configure(state="disabled")
            show_message(self._error_label, "Online donations are not configured on this installation.")

    @staticmethod
    def _small_entry(parent: ctk.CTkFrame, placeholder: str, width: int, show: str = "") -> ctk.CTkEntry:
        entry = ctk.CTkEntry(
            parent,
            placeholder_text=placeholder,
            font=FONT_BODY,
            fg_color=INPUT_BG,
            border_color=INPUT_BORDER,
            text_color=TEXT_PRIMARY,
            height=INPUT_HEIGHT,
            width=width,
            corner_radius=CORNER_RADIUS,
            show=show,
        )
        entry.pack(side="left", padx=(0, PADDING_SM))
        return entry

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _update_preview(self) -> None:
        raw = self._amount_entry.get()
        try:
            amount = self._service.parse_amount(raw)
        except LifeStreamError:
            self._preview_label.configure(text="")
            return
        settled = self._service.settlement_preview(amount)
        self._preview_label.configure(text=f"Recorded as {settled:,} {self._service.settlement_currency}")

    def _handle_donate(self) -> None:
        hide_message(self._error_label)
        self._receipt_label.pack_forget()
        try:
            card = CardDetails(
                number=self._card_entry.get().strip(),
                exp_month=int(self._month_entry.get().strip() or 0),
                exp_year=int(self._year_entry.get().strip() or 0),
                cvc=self._cvc_entry.get().strip(),
            )
        except (ValueError, PydanticValidationError):
            show_message(self._error_label, "Please check the card number, expiry date and CVC.")
            return

        raw_amount = self._amount_entry.get()
        self._donate_btn.configure(text="Processing...", state="disabled")
        self._run(lambda: self._service.donate(raw_amount, card), self._handle_result, name="donate")

    def _handle_result(self, result: ServiceResult[DonationReceipt]) -> None:
        self._donate_btn.configure(text="Donate", state="normal")
        for entry in (self._card_entry, self._month_entry, self._year_entry, self._cvc_entry):
            set_entry(entry, "")
        if not result.success or result.data is None:
            show_message(self._error_label, result.error or "The donation could not be completed.")
            return
        receipt = result.data
        text = (
            f"Thank you! {receipt.amount:,} {receipt.currency} received.\n"
            f"Reference: {receipt.payment_intent_id}"
        )
        if not receipt.recorded:
            text += "\nYour payment went through but is not yet shown in the totals."
        self._receipt_label.configure(text=text)
        self._receipt_label.pack(fill="x", pady=(PADDING_SM, 0))
        set_entry(self._amount_entry, "")
        self._preview_label.configure(text="")
        self._toast("Donation successful. Thank you!", "success")
