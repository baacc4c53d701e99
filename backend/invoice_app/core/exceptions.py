"""
Eccezioni Custom per l'applicazione.
Progetto: Invoice App (Gestionale Fatture)

Definisce eccezioni specifiche del dominio per una gestione
centralizzata degli errori.

NOTA: BusinessValidationError è volutamente distinta da pydantic.ValidationError.
- pydantic.ValidationError: errori di formato/tipo nei dati di input (handler → 400)
- BusinessValidationError: violazioni delle regole di business logic (handler → 400)
- ReferentialIntegrityError: riferimento a fattura/indirizzo inesistente (handler → 400)
"""

from typing import Any, Dict, Optional

__all__ = [
    "AppException",
    "NotFoundError",
    "BusinessValidationError",
    "ReferentialIntegrityError",
]


class AppException(Exception):
    """
    Base exception per l'applicazione.

    Tutte le eccezioni custom ereditano da questa classe base.

    Attributes:
        status_code: HTTP status code da restituire al client
        error_code: Identificativo univoco dell'errore per il frontend
        detail: Messaggio di errore leggibile per l'utente
        extra: Dizionario con dati aggiuntivi per il frontend
    """

    # Default values - overridden in subclasses
    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        detail: str,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Inizializza l'eccezione.

        Args:
            detail: Messaggio di errore dettagliato
            error_code: Identificativo univoco (default: quello di classe)
            extra: Dati aggiuntivi da passare al frontend (default: None)
        """
        self.detail = detail
        self.error_code = error_code if error_code is not None else self.error_code
        self.extra = extra
        self.status_code = self.__class__.status_code
        super().__init__(detail)


class NotFoundError(AppException):
    """
    Eccezione sollevata quando una risorsa non viene trovata in lettura.

    Utilizzata dalle operazioni di sola lettura (es. dettaglio fattura).
    Le operazioni di scrittura usano invece ReferentialIntegrityError.
    """

    status_code: int = 404
    error_code: str = "RESOURCE_NOT_FOUND"

    def __init__(
        self,
        detail: str = "Risorsa non trovata",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class BusinessValidationError(ValueError, AppException):
    """
    Eccezione sollevata per violazioni delle regole di business logic.

    Eredita da ValueError per essere catturata dai validatori Pydantic.

    NON confondere con pydantic.ValidationError che gestisce
    la validazione dello schema/formato dei dati in input.

    Esempi di utilizzo:
        - "La somma delle righe non corrisponde al totale fattura"
    """

    status_code: int = 400
    error_code: str = "BUSINESS_VALIDATION_ERROR"

    def __init__(
        self,
        detail: str = "Validazione dati fallita",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        # Chiama AppException.__init__ direttamente per evitare ValueError
        AppException.__init__(self, detail, error_code, extra)


class ReferentialIntegrityError(AppException):
    """
    Eccezione sollevata quando un'operazione di scrittura fa riferimento
    a un'entità inesistente.

    Lo schema non dichiara foreign key: l'integrità referenziale è
    verificata dal service prima di ogni scrittura.

    Attributes:
        entity: Tipo di entità mancante ("invoice", "sender address", ...)
        entity_id: ID richiesto e non trovato
    """

    status_code: int = 400
    error_code: str = "REFERENTIAL_INTEGRITY_ERROR"

    def __init__(
        self,
        entity: str,
        entity_id: Any,
        detail: Optional[str] = None,
    ) -> None:
        """
        Inizializza l'eccezione ReferentialIntegrityError.

        Args:
            entity: Tipo di entità mancante
            entity_id: ID dell'entità mancante
            detail: Messaggio (default: "<Entità> con ID <id> inesistente")
        """
        self.entity = entity
        self.entity_id = entity_id
        if detail is None:
            detail = f"{entity.capitalize()} con ID {entity_id} inesistente"
        super().__init__(
            detail,
            extra={"entity": entity, "id": entity_id},
        )
