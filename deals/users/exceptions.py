"""Exceptions spécifiques au module User."""

class UserDomainException(Exception):
    """Classe de base pour les exceptions du module User."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class UserNotFoundException(UserDomainException):
    """Levée lorsqu'un utilisateur n'est pas trouvé."""
    def __init__(self, user_id: int):
        super().__init__(f"Utilisateur avec ID {user_id} non trouvé.")
        self.user_id = user_id

class DuplicateEmailException(UserDomainException):
    """Levée lorsqu'un compte existe déjà pour cet email."""
    def __init__(self, email: str):
        super().__init__(f"Un compte avec l'email {email} existe déjà.")
        self.email = email

class InitialSetupClosedException(UserDomainException):
    """Levée lorsque la configuration initiale est demandée alors que des comptes existent déjà."""
    def __init__(self):
        super().__init__("La configuration initiale a déjà été effectuée.")
