"""Product catalogue, templates, and fixed defaults for Right Guard."""

from __future__ import annotations

from typing import Dict, Final

APP_CONFIG: Final = {
    "name": "Right Guard",
    "tagline": "Know Your Rights. Instantly.",
    "version": "1.0.0",
    "support_email": "support@rightguard.app",
}

US_STATES: Final = (
    "Alabama", "Alaska", "Arizona", "Arkansas", "California", "Colorado",
    "Connecticut", "Delaware", "Florida", "Georgia", "Hawaii", "Idaho",
    "Illinois", "Indiana", "Iowa", "Kansas", "Kentucky", "Louisiana",
    "Maine", "Maryland", "Massachusetts", "Michigan", "Minnesota",
    "Mississippi", "Missouri", "Montana", "Nebraska", "Nevada",
    "New Hampshire", "New Jersey", "New Mexico", "New York",
    "North Carolina", "North Dakota", "Ohio", "Oklahoma", "Oregon",
    "Pennsylvania", "Rhode Island", "South Carolina", "South Dakota",
    "Tennessee", "Texas", "Utah", "Vermont", "Virginia", "Washington",
    "West Virginia", "Wisconsin", "Wyoming",
)  # fmt: skip

DEFAULT_JURISDICTION: Final = "California"

LANGUAGES: Final[Dict[str, str]] = {
    "en": "English",
    "es": "Español",
}
DEFAULT_LANGUAGE: Final = "en"

PRICING: Final[Dict[str, float]] = {
    "stateSpecificScripts": 0.99,
    "enhancedRecording": 1.99,
    "unlimitedBilingual": 4.99,
}

PREMIUM_FEATURES: Final[Dict[str, Dict[str, object]]] = {
    "stateSpecific": {
        "name": "State-Specific Scripts",
        "price": PRICING["stateSpecificScripts"],
        "description": "Advanced scripts tailored to your state's specific laws",
    },
    "enhancedRecording": {
        "name": "Enhanced Recording",
        "price": PRICING["enhancedRecording"],
        "description": "Cloud storage, automatic backup, and extended recording time",
    },
    "unlimitedBilingual": {
        "name": "Unlimited Bilingual Access",
        "price": PRICING["unlimitedBilingual"],
        "description": "Full access to all content in English and Spanish",
    },
}

ALERT_TYPES: Final = ("emergency", "recording", "followUp")
ALERT_STATUSES: Final = ("sent", "delivered", "failed")

ALERT_TEMPLATES: Final[Dict[str, Dict[str, str]]] = {
    "en": {
        "emergency": (
            "🚨 EMERGENCY ALERT: I'm currently in a situation that requires documentation. "
            "My location: {location}. Time: {time}. Please check on me."
        ),
        "recording": (
            "📹 I'm currently recording an interaction with law enforcement at {location}. "
            "Time: {time}. This is for documentation purposes."
        ),
        "followUp": "✅ Situation resolved. Thank you for your concern. Recorded evidence available if needed.",
    },
    "es": {
        "emergency": (
            "🚨 ALERTA DE EMERGENCIA: Actualmente estoy en una situación que requiere documentación. "
            "Mi ubicación: {location}. Hora: {time}. Por favor verifiquen mi estado."
        ),
        "recording": (
            "📹 Actualmente estoy grabando una interacción con las fuerzas del orden en {location}. "
            "Hora: {time}. Esto es para fines de documentación."
        ),
        "followUp": "✅ Situación resuelta. Gracias por su preocupación. Evidencia grabada disponible si es necesaria.",
    },
}

LOCATION_UNAVAILABLE: Final = "Location unavailable"

BASIC_RIGHTS: Final[Dict[str, Dict[str, object]]] = {
    "en": {
        "title": "Your Basic Rights",
        "rights": [
            "You have the right to remain silent",
            "You have the right to refuse searches",
            "You have the right to leave if not detained",
            "You have the right to record in public",
            "You have the right to an attorney",
        ],
        "scripts": {
            "silence": "I am exercising my right to remain silent. I want to speak to a lawyer.",
            "search": "I do not consent to any searches. I am exercising my constitutional rights.",
            "detention": "Am I free to leave? I would like to leave if I'm not being detained.",
            "recording": "I am recording this interaction for my safety and legal protection.",
        },
    },
    "es": {
        "title": "Sus Derechos Básicos",
        "rights": [
            "Tiene derecho a permanecer en silencio",
            "Tiene derecho a rechazar registros",
            "Tiene derecho a irse si no está detenido",
            "Tiene derecho a grabar en público",
            "Tiene derecho a un abogado",
        ],
        "scripts": {
            "silence": "Estoy ejerciendo mi derecho a permanecer en silencio. Quiero hablar con un abogado.",
            "search": "No consiento ningún registro. Estoy ejerciendo mis derechos constitucionales.",
            "detention": "¿Soy libre de irme? Me gustaría irme si no estoy siendo detenido.",
            "recording": "Estoy grabando esta interacción para mi seguridad y protección legal.",
        },
    },
}

FALLBACK_GUIDE_SCRIPT: Final = (
    "I am exercising my constitutional rights. I wish to remain silent and speak to an attorney."
)

RECORDING_CONFIG: Final = {
    "max_duration_seconds": 300,
    "audio_format": "audio/webm",
    "video_format": "video/webm",
}

LOCAL_STORAGE_KEYS: Final[Dict[str, str]] = {
    "user": "rightguard_user",
    "selected_state": "rightguard_selected_state",
    "language": "rightguard_language",
    "emergency_contacts": "rightguard_emergency_contacts",
}

TABLES: Final[Dict[str, str]] = {
    "users": "users",
    "legal_guides": "legal_guides",
    "incident_records": "incident_records",
    "alert_logs": "alert_logs",
    "purchase_logs": "purchase_logs",
}
