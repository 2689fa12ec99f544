# core/logging.py - Logging structuré JSON pour le workflow des devis

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pathlib import Path

from core.config import settings


class JSONFormatter(logging.Formatter):
    """
    Formatter pour logs structurés au format JSON.
    Facilite l'indexation dans des systèmes comme ELK, Datadog, etc.
    """

    # Champs personnalisés acceptés via extra={}
    EXTRA_FIELDS = (
        "quote_id",
        "actor_id",
        "quote_event",
        "from_status",
        "to_status",
        "version",
        "result",
        "reason",
    )

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for field_name in self.EXTRA_FIELDS:
            if hasattr(record, field_name):
                log_data[field_name] = getattr(record, field_name)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_workflow_logger(name: str = "designquote.workflow", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure un logger structuré pour les transitions de statut des devis.

    Args:
        name: Nom du logger (hiérarchie: designquote.workflow.*)
        log_file: Chemin optionnel vers un fichier de logs dédié

    Returns:
        Logger configuré avec JSON formatter

    Usage:
        logger = setup_workflow_logger("designquote.workflow")
        logger.info(
            "Quote transition",
            extra={"quote_id": quote.id, "quote_event": "approve", "result": "success"}
        )
    """
    logger = logging.getLogger(name)

    # Éviter duplication si déjà configuré
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    logger.propagate = False

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(JSONFormatter())
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)

    return logger


# Logger workflow global
workflow_logger = setup_workflow_logger("designquote.workflow", log_file=settings.workflow_log_file)


def log_quote_event(
    event: str,
    quote_id: Optional[str] = None,
    actor_id: Optional[str] = None,
    result: str = "unknown",
    from_status: Optional[str] = None,
    to_status: Optional[str] = None,
    version: Optional[int] = None,
    reason: Optional[str] = None,
) -> None:
    """
    Helper pour logger les événements du workflow de manière standardisée.

    Args:
        event: Événement du workflow (submit-for-approval, approve, export...)
        quote_id: ID du devis
        actor_id: Identité de l'acteur (sub du jeton)
        result: success, refused, error
        from_status / to_status: statuts avant/après
        version: version du devis après transition
        reason: motif en cas de refus ou d'erreur

    Exemples:
        log_quote_event("approve", quote_id="...", actor_id="42", result="success",
                        from_status="PENDING_APPROVAL", to_status="SENT", version=1)
        log_quote_event("submit-for-approval", quote_id="...", result="refused",
                        from_status="SENT", reason="invalid transition")
    """
    log_context = {
        "quote_id": quote_id,
        "actor_id": actor_id,
        "quote_event": event,
        "from_status": from_status,
        "to_status": to_status,
        "version": version,
        "result": result,
        "reason": reason,
    }

    # Filtrer les None
    log_context = {k: v for k, v in log_context.items() if v is not None}

    level = logging.INFO
    if result == "refused":
        level = logging.WARNING
    elif result == "error":
        level = logging.ERROR

    workflow_logger.log(level, f"Quote event: {event}", extra=log_context)
