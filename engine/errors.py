"""Fehlerklassen des Planungskerns."""


class PlannerError(Exception):
    """Basisklasse aller Fehler des Unterrichtsplaners."""


class PlanConfigurationError(PlannerError, ValueError):
    """Ungültige Eingaben, erkannt bevor die Generierung beginnt."""


class AdjustmentError(PlannerError):
    """Manuelle Anpassung (Review, Verschieben, Löschen) nicht möglich."""


class InvalidTransitionError(AdjustmentError):
    """Unzulässiger Zustandswechsel einer Einheit."""


class SequenceConflictError(AdjustmentError):
    """Doppelte oder lückenhafte Reihenfolge – darf nicht gespeichert werden."""
