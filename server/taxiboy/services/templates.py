"""Rendering of notification emails and the cancellation page."""

from datetime import datetime, timezone, tzinfo
from html import escape
from zoneinfo import ZoneInfo

from ..models.booking import BookingRecord, RideType
from ..schemas.booking import parse_requested_time
from .notifications import MailMessage

WEEKDAYS = {
    "en": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
    "de": ["Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag", "Sonntag"],
}

MONTHS = {
    "en": ["January", "February", "March", "April", "May", "June", "July",
           "August", "September", "October", "November", "December"],
    "de": ["Januar", "Februar", "März", "April", "Mai", "Juni", "Juli",
           "August", "September", "Oktober", "November", "Dezember"],
}

CATALOG = {
    "en": {
        "asap": "As soon as possible",
        "ride_type": {RideType.IMMEDIATE: "Immediate Ride", RideType.SCHEDULED: "Scheduled Ride"},
        "booked_subject": "{company} - Booking Confirmation #{number}",
        "booked_heading": "Your Ride Has Been Booked!",
        "booking_number": "Booking Number",
        "booked_intro": "Thank you for choosing {company}. Here are your booking details:",
        "booking_type": "Booking Type",
        "pickup": "Pickup Location",
        "destination": "Destination",
        "date_time": "Date/Time",
        "vehicle_type": "Vehicle Type",
        "name": "Name",
        "phone": "Phone",
        "email": "Email",
        "customer_name": "Customer Name",
        "customer_phone": "Customer Phone",
        "customer_email": "Customer Email",
        "keep_number": "Please keep your booking number for future reference.",
        "cancel_question": "Need to cancel your ride?",
        "cancel_instructions": "Click the link below to cancel your booking:",
        "cancel_button": "Cancel My Ride",
        "support": "If you need any other modifications to your booking, please contact our support team.",
        "admin_booked_subject": "[ADMIN] New Booking #{number}",
        "admin_booked_heading": "New Booking Received",
        "admin_booked_intro": "A new booking has been received. Details below:",
        "admin_booked_action": "Please assign a driver to this booking.",
        "cancelled_subject": "{company} - Booking Cancellation Confirmation #{number}",
        "cancelled_heading": "Your Ride Has Been Cancelled",
        "cancelled_banner": "Booking #{number} has been cancelled",
        "cancelled_intro": "Your booking has been successfully cancelled. Here are the details of the cancelled booking:",
        "cancelled_rebook": "If you need to book another ride, please visit our website.",
        "thanks": "Thank you for choosing {company}!",
        "admin_cancelled_subject": "[ADMIN] Booking Cancelled #{number}",
        "admin_cancelled_heading": "Booking Cancellation Notice",
        "admin_cancelled_intro": "A customer has cancelled their booking. Details below:",
        "admin_cancelled_action": "Please update the scheduling system accordingly.",
        "page_title": "Booking Cancelled",
        "page_heading": "Booking Cancelled Successfully",
        "page_number": "Booking #{number}",
        "page_body": "Your booking has been cancelled and you will receive a confirmation email shortly.",
        "page_thanks": "Thank you for using {company}!",
        "booked_message": "Booking confirmed! Check your email (spam folder) for details.",
        "booking_failed": "Failed to process booking. Please try again.",
        "not_found": "Booking not found or already cancelled.",
        "cancel_failed": "Failed to cancel booking. Please try again or contact support.",
    },
    "de": {
        "asap": "Sofort",
        "ride_type": {RideType.IMMEDIATE: "Sofortfahrt", RideType.SCHEDULED: "Geplante Fahrt"},
        "booked_subject": "{company} - Buchung Bestätigt #{number}",
        "booked_heading": "Ihre Fahrt wurde gebucht!",
        "booking_number": "Buchungsnummer",
        "booked_intro": "Vielen Dank für Ihre Wahl von {company}. Hier sind Ihre Buchungsdetails:",
        "booking_type": "Buchungsart",
        "pickup": "Abfahrtort",
        "destination": "Zielort",
        "date_time": "Datum/Uhrzeit",
        "vehicle_type": "Fahrzeugtyp",
        "name": "Name",
        "phone": "Telefon",
        "email": "E-Mail",
        "customer_name": "Kundenname",
        "customer_phone": "Kunden-Telefon",
        "customer_email": "Kunden-E-Mail",
        "keep_number": "Bitte bewahren Sie Ihre Buchungsnummer für zukünftige Referenzen auf.",
        "cancel_question": "Möchten Sie Ihre Fahrt stornieren?",
        "cancel_instructions": "Klicken Sie auf den untenstehenden Link, um Ihre Buchung zu stornieren:",
        "cancel_button": "Buchung Stornieren",
        "support": "Wenn Sie weitere Änderungen an Ihrer Buchung benötigen, kontaktieren Sie bitte unser Support-Team.",
        "admin_booked_subject": "[ADMIN] Neue Buchung erhalten #{number}",
        "admin_booked_heading": "Neue Buchung erhalten",
        "admin_booked_intro": "Eine neue Buchung wurde erhalten. Hier sind die Details der Buchung:",
        "admin_booked_action": "Bitte weisen Sie dieser Buchung einen Fahrer zu.",
        "cancelled_subject": "{company} - Buchungsstornierung Bestätigung #{number}",
        "cancelled_heading": "Ihre Fahrt wurde storniert",
        "cancelled_banner": "Buchung #{number} wurde storniert",
        "cancelled_intro": "Ihre Buchung wurde erfolgreich storniert. Hier sind die Details der stornierten Buchung:",
        "cancelled_rebook": "Wenn Sie eine neue Fahrt buchen möchten, besuchen Sie bitte unsere Website.",
        "thanks": "Vielen Dank, dass Sie sich für {company} entschieden haben!",
        "admin_cancelled_subject": "[ADMIN] Buchung Storniert #{number}",
        "admin_cancelled_heading": "Buchung storniert",
        "admin_cancelled_intro": "Ein Kunde hat seine Buchung storniert. Details unten:",
        "admin_cancelled_action": "Bitte aktualisieren Sie das Planungssystem entsprechend.",
        "page_title": "Buchung storniert",
        "page_heading": "Buchung erfolgreich storniert",
        "page_number": "Buchungsnummer #{number}",
        "page_body": "Ihre Buchung wurde erfolgreich storniert und Sie erhalten in Kürze eine Bestätigungs-E-Mail.",
        "page_thanks": "Vielen Dank für die Nutzung von {company}!",
        "booked_message": "Buchung erfolgreich! Überprüfen Sie Ihre E-Mail (Spam-Ordner) für weitere Informationen.",
        "booking_failed": "Fehler beim Verarbeiten der Buchung. Bitte versuchen Sie es erneut.",
        "not_found": "Buchung nicht gefunden oder bereits storniert.",
        "cancel_failed": "Stornierung fehlgeschlagen. Bitte versuchen Sie es erneut oder kontaktieren Sie den Support.",
    },
}

BOX_STYLE = "padding: 15px; margin: 20px 0; border-radius: 5px;"
LIST_STYLE = "list-style: none; padding: 0;"


def resolve_timezone(name: str) -> tzinfo:
    """Return a tzinfo for a zone name; UTC does not need the tz database."""
    if name.upper() in ("UTC", "Z"):
        return timezone.utc
    return ZoneInfo(name)


def format_pickup_time(moment: datetime, language: str = "en", tz: tzinfo = timezone.utc) -> str:
    """
    Format a pickup time as full date plus short time.

    Naive timestamps are taken to be in the display time zone.

    >>> format_pickup_time(datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc))
    'Saturday, March 1, 2025 at 10:00 AM'
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=tz)
    local = moment.astimezone(tz)
    weekday = WEEKDAYS[language][local.weekday()]
    month = MONTHS[language][local.month - 1]
    if language == "de":
        return f"{weekday}, {local.day}. {month} {local.year} um {local:%H:%M}"
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{weekday}, {month} {local.day}, {local.year} at {hour}:{local:%M} {meridiem}"


class MessageRenderer:
    """Build the messages and pages the booking lifecycle sends out."""

    def __init__(self, company_name: str = "TaxiBoy", language: str = "en",
                 display_timezone: str = "UTC", sender: str | None = None,
                 admin_recipient: str | None = None):
        self.company = company_name
        self.language = language
        self.tz = resolve_timezone(display_timezone)
        self.sender = sender
        self.admin_recipient = admin_recipient
        self.text = CATALOG[language]

    def t(self, key: str, **values) -> str:
        """Look up a catalog entry, filling in company name and values."""
        return self.text[key].format(company=self.company, **values)

    def display_time(self, record: BookingRecord) -> str:
        """Human-readable pickup time for a booking."""
        if record.is_asap:
            return self.t("asap")
        return format_pickup_time(parse_requested_time(record.date_time), self.language, self.tz)

    def _items(self, rows) -> str:
        lines = [
            f"<li><strong>{escape(label)}:</strong> {escape(value)}</li>" if label else "<hr>"
            for label, value in rows
        ]
        return f'<ul style="{LIST_STYLE}">' + "".join(lines) + "</ul>"

    def _banner(self, text: str, background: str, color: str) -> str:
        return (
            f'<div style="background-color: {background}; {BOX_STYLE}">'
            f'<h2 style="color: {color}; margin: 0;">{escape(text)}</h2></div>'
        )

    def _booking_rows(self, record: BookingRecord, when: str) -> list:
        return [
            (self.t("booking_type"), self.text["ride_type"][record.ride_type]),
            (self.t("pickup"), record.pickup_location),
            (self.t("destination"), record.destination),
            (self.t("date_time"), when),
            (self.t("vehicle_type"), record.vehicle_type),
        ]

    def customer_confirmation(self, record: BookingRecord, cancellation_url: str) -> MailMessage:
        when = self.display_time(record)
        rows = self._booking_rows(record, when) + [
            (self.t("name"), record.name),
            (self.t("phone"), record.phone),
            (self.t("email"), record.email),
        ]
        html = (
            f"<h1>{escape(self.t('booked_heading'))}</h1>"
            + self._banner(f"{self.t('booking_number')}: {record.booking_number}", "#f3f4f6", "#1f2937")
            + f"<p>{escape(self.t('booked_intro'))}</p>"
            + self._items(rows)
            + f"<p>{escape(self.t('keep_number'))}</p>"
            + f'<div style="background-color: #fee2e2; {BOX_STYLE}">'
            + f'<p style="margin: 0; color: #991b1b;">{escape(self.t("cancel_question"))}</p>'
            + f'<p style="margin: 5px 0;">{escape(self.t("cancel_instructions"))}</p>'
            + f'<a href="{escape(cancellation_url, quote=True)}" style="display: inline-block; '
              'padding: 10px 20px; background-color: #dc2626; color: white; '
              f'text-decoration: none; border-radius: 5px;">{escape(self.t("cancel_button"))}</a>'
            + "</div>"
            + f'<p style="color: #6b7280; font-size: 0.875rem;">{escape(self.t("support"))}</p>'
        )
        return MailMessage(
            role="customer",
            recipient=record.email,
            subject=self.t("booked_subject", number=record.booking_number),
            html=html,
            sender=self.sender,
        )

    def admin_confirmation(self, record: BookingRecord) -> MailMessage:
        when = self.display_time(record)
        rows = self._booking_rows(record, when) + [
            (None, None),
            (self.t("customer_name"), record.name),
            (self.t("customer_phone"), record.phone),
            (self.t("customer_email"), record.email),
        ]
        html = (
            f"<h1>{escape(self.t('admin_booked_heading'))}</h1>"
            + self._banner(f"{self.t('booking_number')}: {record.booking_number}", "#f3f4f6", "#1f2937")
            + f"<p>{escape(self.t('admin_booked_intro'))}</p>"
            + self._items(rows)
            + f"<p>{escape(self.t('admin_booked_action'))}</p>"
        )
        return MailMessage(
            role="admin",
            recipient=self.admin_recipient or "",
            subject=self.t("admin_booked_subject", number=record.booking_number),
            html=html,
            sender=self.sender,
        )

    def customer_cancellation(self, record: BookingRecord) -> MailMessage:
        rows = [
            (self.t("booking_number"), record.booking_number),
            (self.t("name"), record.name),
            (self.t("pickup"), record.pickup_location),
            (self.t("destination"), record.destination),
        ]
        html = (
            f"<h1>{escape(self.t('cancelled_heading'))}</h1>"
            + self._banner(self.t("cancelled_banner", number=record.booking_number), "#fee2e2", "#991b1b")
            + f"<p>{escape(self.t('cancelled_intro'))}</p>"
            + self._items(rows)
            + f"<p>{escape(self.t('cancelled_rebook'))}</p>"
            + f"<p>{escape(self.t('thanks'))}</p>"
        )
        return MailMessage(
            role="customer",
            recipient=record.email,
            subject=self.t("cancelled_subject", number=record.booking_number),
            html=html,
            sender=self.sender,
        )

    def admin_cancellation(self, record: BookingRecord) -> MailMessage:
        rows = [
            (self.t("booking_number"), record.booking_number),
            (self.t("customer_name"), record.name),
            (self.t("customer_email"), record.email),
            (self.t("customer_phone"), record.phone),
            (self.t("pickup"), record.pickup_location),
            (self.t("destination"), record.destination),
            (self.t("vehicle_type"), record.vehicle_type),
        ]
        html = (
            f"<h1>{escape(self.t('admin_cancelled_heading'))}</h1>"
            + self._banner(self.t("cancelled_banner", number=record.booking_number), "#fee2e2", "#991b1b")
            + f"<p>{escape(self.t('admin_cancelled_intro'))}</p>"
            + self._items(rows)
            + f"<p>{escape(self.t('admin_cancelled_action'))}</p>"
        )
        return MailMessage(
            role="admin",
            recipient=self.admin_recipient or "",
            subject=self.t("admin_cancelled_subject", number=record.booking_number),
            html=html,
            sender=self.sender,
        )

    def cancellation_page(self, record: BookingRecord) -> str:
        """HTML page shown after the cancellation link was opened."""
        return f"""<html>
  <head>
    <title>{escape(self.t("page_title"))}</title>
    <style>
      body {{ font-family: Arial, sans-serif; max-width: 600px; margin: 40px auto; padding: 20px; text-align: center; }}
      .success-box {{ background-color: #fee2e2; border-radius: 8px; padding: 20px; margin: 20px 0; }}
      .booking-number {{ font-size: 1.2em; font-weight: bold; color: #991b1b; }}
    </style>
  </head>
  <body>
    <div class="success-box">
      <h1>{escape(self.t("page_heading"))}</h1>
      <p class="booking-number">{escape(self.t("page_number", number=record.booking_number))}</p>
    </div>
    <p>{escape(self.t("page_body"))}</p>
    <p>{escape(self.t("page_thanks"))}</p>
  </body>
</html>"""
