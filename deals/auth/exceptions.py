"""
Erreurs d'authentification et d'autorisation.

- Transport (jeton absent ou invalide, identifiants refusés) : HTTPException 401
  levées directement par les dépendances et le routeur d'auth.
- Domaine (Forbidden, Unauthenticated) : levées par le guard, traduites par
  `to_http_exception` dans les routeurs métier.
"""
from typing import Optional

from fastapi import HTTPException, status

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}

class _BearerChallengeException(HTTPException):
    detail_message = "Authentification requise"

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=self.detail_message,
            headers=BEARER_CHALLENGE,
        )

class TokenMissingException(_BearerChallengeException):
    detail_message = "Token d'authentification manquant"

class TokenInvalidException(_BearerChallengeException):
    detail_message = "Token d'authentification invalide"

class InvalidCredentialsException(_BearerChallengeException):
    detail_message = "Email ou mot de passe incorrect"

# --- Autorisation (domaine) ---

class AuthorizationException(Exception):
    """Classe de base des refus d'autorisation."""
    reason = "Authorization"
    default_message = "Accès refusé"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

class ForbiddenException(AuthorizationException):
    """L'identité est connue mais n'a pas le droit d'effectuer l'opération."""
    reason = "Forbidden"
    default_message = "Permission refusée"

class UnauthenticatedException(AuthorizationException):
    """Aucune identité n'accompagne l'opération."""
    reason = "Unauthenticated"
    default_message = "Authentification requise"

def to_http_exception(exc: AuthorizationException) -> HTTPException:
    if isinstance(exc, UnauthenticatedException):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message, headers=BEARER_CHALLENGE)
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=exc.message)
