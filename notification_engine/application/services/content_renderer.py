"""Turn a template code and an event into user-facing copy."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from notification_engine.domain.entities import (
    Event,
    EventType,
    RenderedContent,
    TemplateCode,
    payload_text,
)

_PAYMENT_EVENTS = frozenset(
    {
        EventType.PAYMENT_RECEIVED.value,
        EventType.PAYMENT_FAILED.value,
        EventType.PAYMENT_CONFIRMATION.value,
        EventType.PAYMENT_REMINDER.value,
    }
)


def _text(payload: dict[str, Any], *keys: str, default: str) -> str:
    for key in keys:
        value = payload_text(payload, key)
        if value:
            return value
    return default


def _step_completed(payload: dict[str, Any]) -> tuple[str, str]:
    step = _text(payload, "step_label", "step_name", default="étape")
    return "Étape terminée", f'L\'étape "{step}" a été terminée avec succès.'


def _document_approved(payload: dict[str, Any]) -> tuple[str, str]:
    document = _text(payload, "document_type", default="document")
    return "Document approuvé", f'Votre document "{document}" a été approuvé.'


def _document_rejected(payload: dict[str, Any]) -> tuple[str, str]:
    document = _text(payload, "document_type", default="document")
    return "Document à corriger", f'Votre document "{document}" nécessite des corrections.'


def _document_uploaded(payload: dict[str, Any]) -> tuple[str, str]:
    return "Document reçu", "Votre document a bien été reçu et sera traité prochainement."


def _admin_document_delivered(payload: dict[str, Any]) -> tuple[str, str]:
    count = _text(payload, "document_count", default="1")
    return (
        "Nouveaux documents disponibles",
        f"Votre conseiller vous a envoyé {count} document(s).",
    )


def _admin_step_completed(payload: dict[str, Any]) -> tuple[str, str]:
    step = _text(payload, "step_name", default="admin")
    return "Étape administrative terminée", f'Votre conseiller a terminé l\'étape "{step}".'


def _payment_confirmation(payload: dict[str, Any]) -> tuple[str, str]:
    amount = _text(payload, "amount_paid", "amount", default="0")
    currency = _text(payload, "currency", default="EUR")
    return "Paiement confirmé", f"Votre paiement de {amount} {currency} a bien été reçu."


def _payment_failed(payload: dict[str, Any]) -> tuple[str, str]:
    return "Échec du paiement", "Le paiement a échoué. Veuillez réessayer."


def _payment_reminder(payload: dict[str, Any]) -> tuple[str, str]:
    amount = payload_text(payload, "amount_due") or payload_text(payload, "amount")
    if amount:
        currency = _text(payload, "currency", default="EUR")
        return (
            "Rappel de paiement",
            f"Un paiement de {amount} {currency} est en attente sur votre dossier.",
        )
    return "Rappel de paiement", "Un paiement est en attente sur votre dossier."


def _set_password(payload: dict[str, Any]) -> tuple[str, str]:
    return (
        "Votre compte a été créé",
        "Votre compte Partners LLC a été créé. Cliquez sur le lien reçu par email "
        "pour choisir votre mot de passe.",
    )


def _welcome(payload: dict[str, Any]) -> tuple[str, str]:
    return (
        "Bienvenue",
        "Votre dossier a été créé avec succès. Nous vous accompagnons dans votre démarche.",
    )


def _default(payload: dict[str, Any]) -> tuple[str, str]:
    return "Nouvelle notification", "Vous avez une nouvelle mise à jour sur votre dossier."


_TEMPLATES: dict[str, Callable[[dict[str, Any]], tuple[str, str]]] = {
    TemplateCode.STEP_COMPLETED.value: _step_completed,
    TemplateCode.DOCUMENT_APPROVED.value: _document_approved,
    TemplateCode.DOCUMENT_REJECTED.value: _document_rejected,
    TemplateCode.DOCUMENT_UPLOADED.value: _document_uploaded,
    TemplateCode.ADMIN_DOCUMENT_DELIVERED.value: _admin_document_delivered,
    TemplateCode.ADMIN_STEP_COMPLETED.value: _admin_step_completed,
    TemplateCode.PAYMENT_CONFIRMATION.value: _payment_confirmation,
    TemplateCode.PAYMENT_FAILED.value: _payment_failed,
    TemplateCode.PAYMENT_REMINDER.value: _payment_reminder,
    TemplateCode.SET_PASSWORD.value: _set_password,
    TemplateCode.WELCOME.value: _welcome,
}


class ContentRenderer:
    """Render notification copy. Unknown templates fall back to a generic message."""

    def __init__(self, base_url: str) -> None:
        self.base_url = (base_url or "").rstrip("/")

    def render(self, template_code: str, event: Event) -> RenderedContent:
        payload = event.payload if isinstance(event.payload, dict) else {}
        builder = _TEMPLATES.get(template_code, _default)
        title, message = builder(payload)
        return RenderedContent(title=title, message=message, action_url=self.action_url(event))

    def action_url(self, event: Event) -> str:
        """Deep link into the web application for ``event``."""

        dossier_id = event.dossier_id
        if dossier_id:
            return f"{self.base_url}/dashboard/dossiers/{dossier_id}"
        if event.event_type in _PAYMENT_EVENTS:
            order_id = payload_text(event.payload, "order_id")
            if order_id:
                return f"{self.base_url}/dashboard/payment/{order_id}"
        return f"{self.base_url}/dashboard"


__all__ = ["ContentRenderer"]
