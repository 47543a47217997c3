#!/usr/bin/env python3
# protocols/errors.py
"""
Exceptions levées par les routeurs DTN.
"""


class RoutingError(Exception):
    """Erreur de base des routeurs DTN."""


class ContactLostError(RoutingError):
    """
    Levée lorsqu'un routeur interroge un pair dont le contact n'est plus actif.
    L'échange d'état entre pairs n'est valide que pendant la durée du contact.
    """

    def __init__(self, connection, requester):
        super().__init__(f"Contact {connection} perdu pour {requester}")
        self.connection = connection
        self.requester = requester
