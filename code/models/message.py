# models/message.py
"""
Message transporté dans le réseau opportuniste.

Les métadonnées de routage (rôle de fourmi, destination de référence, longueur
du chemin) sont stockées dans un petit dictionnaire de propriétés ouvert.
"""
from enum import Enum


class AntRole(Enum):
    """Rôle d'un message vis-à-vis de l'apprentissage par colonie de fourmis"""
    FORWARD = "forward"     # Cherche encore la destination
    BACKWARD = "backward"   # A atteint la destination, renforce le chemin retour


# Clés des propriétés de routage
ANT_ROLE = 'antRole'
DESTINATION_REF = 'destinationRef'
PATH_LENGTH = 'pathLength'
RETURN_PATH = 'returnPath'


class Message:
    """
    Message identifié de manière unique, avec une destination, un nombre de sauts
    et un dictionnaire de propriétés.
    """

    def __init__(self, from_node, to, id, size, creation_time=0.0, response_size=0):
        """
        Initialise un message.

        Args:
            from_node (Node): nœud source
            to (Node): nœud destinataire
            id (str): identifiant unique du message
            size (int): taille en octets
            creation_time (float): instant de création
            response_size (int): taille de la réponse attendue (0 pour un message sans réponse)
        """
        self.from_node = from_node
        self.to = to
        self.id = id
        self.size = size
        self.creation_time = creation_time
        self.response_size = response_size
        self.receive_time = creation_time
        self.hop_count = 0
        self.path = [from_node]
        self.properties = {}

    def __str__(self):
        return self.id

    def __repr__(self):
        return f"Message({self.id!r}, {self.from_node}->{self.to}, hops={self.hop_count})"

    def add_node_to_path(self, node):
        """Ajoute un nœud au chemin parcouru et incrémente le nombre de sauts."""
        self.path.append(node)
        self.hop_count += 1

    def add_property(self, key, value):
        """
        Ajoute une propriété au message.

        Raises:
            ValueError: si la propriété existe déjà
        """
        if key in self.properties:
            raise ValueError(f"Le message {self.id} a déjà une propriété '{key}'")
        self.properties[key] = value

    def get_property(self, key, default=None):
        return self.properties.get(key, default)

    def update_property(self, key, value):
        """
        Met à jour une propriété existante.

        Raises:
            KeyError: si la propriété n'existe pas
        """
        if key not in self.properties:
            raise KeyError(f"Le message {self.id} n'a pas de propriété '{key}'")
        self.properties[key] = value

    def set_property(self, key, value):
        """Ajoute ou remplace une propriété."""
        self.properties[key] = value

    @property
    def ant_role(self):
        return self.properties.get(ANT_ROLE, AntRole.FORWARD)

    def replicate(self):
        """
        Crée une copie indépendante du message (chemin et propriétés copiés).

        Returns:
            Message: la copie
        """
        m = Message(self.from_node, self.to, self.id, self.size, self.creation_time,
                    self.response_size)
        m.receive_time = self.receive_time
        m.hop_count = self.hop_count
        m.path = list(self.path)
        m.properties = {k: (list(v) if isinstance(v, list) else v)
                        for k, v in self.properties.items()}
        return m
