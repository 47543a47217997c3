#!/usr/bin/env python3
# protocols/base.py
"""
Classe de base pour les routeurs DTN (Delay-Tolerant Networking).
Définit l'interface commune à tous les routeurs : tampon de messages,
livraison directe au destinataire final, mode de file et interrogation des pairs.
"""
import logging
import random

from protocols.errors import ContactLostError

logger = logging.getLogger(__name__)

QUEUE_MODES = ('fifo', 'random')


class DTNRouter:
    """
    Classe de base pour les routeurs DTN.
    Un routeur est attaché à un seul nœud et prend les décisions de transfert
    à chaque pas de temps. Le transfert lui-même est délégué à l'exécuteur
    fourni par le monde simulé (voir simulation/world.py).
    """

    def __init__(self, queue_mode: str = 'fifo', rng: random.Random = None):
        """
        Initialise un routeur DTN.

        Args:
            queue_mode (str): Départage des messages à priorité égale ('fifo' ou 'random')
            rng (random.Random): Générateur aléatoire pour le mode 'random'
        """
        if queue_mode not in QUEUE_MODES:
            raise ValueError(f"Mode de file inconnu: {queue_mode} (attendu: {', '.join(QUEUE_MODES)})")
        self.queue_mode = queue_mode
        self.rng = rng or random.Random()
        self.host = None
        self.world = None
        self.messages = {}      # Tampon : id -> Message
        self.incoming = {}      # Messages en cours de réception : id -> (Message, émetteur)
        self.delivered = set()  # Ids des messages livrés à ce nœud (destinataire final)

    def init(self, host):
        """
        Attache le routeur à son nœud.

        Args:
            host (Node): le nœud propriétaire
        """
        self.host = host

    def attach(self, world):
        """Enregistre l'exécuteur de transferts (le monde simulé)."""
        self.world = world

    def replicate(self):
        """Crée un nouveau routeur avec la même configuration et un état vierge."""
        raise NotImplementedError("Cette méthode doit être implémentée par les sous-classes")

    #*************** Tampon de messages ****************
    def has_message(self, message_id: str) -> bool:
        return message_id in self.messages

    def get_message(self, message_id: str):
        return self.messages.get(message_id)

    def get_message_collection(self):
        return list(self.messages.values())

    def add_to_buffer(self, message):
        self.messages[message.id] = message

    def remove_from_buffer(self, message_id: str):
        return self.messages.pop(message_id, None)

    def create_new_message(self, message):
        """
        Ajoute un message créé localement au tampon.

        Args:
            message (Message): le nouveau message

        Returns:
            bool: True si le message a été accepté
        """
        self.add_to_buffer(message)
        return True

    def accepts(self, message) -> bool:
        """Indique si le routeur accepterait ce message d'un pair."""
        return (not self.has_message(message.id)
                and message.id not in self.incoming
                and message.id not in self.delivered)

    #*************** Transferts ****************
    def receive_message(self, message, from_node):
        """
        Début de réception d'un message (appelé par l'exécuteur de transferts).

        Args:
            message (Message): copie du message en cours de transfert
            from_node (Node): nœud émetteur
        """
        self.incoming[message.id] = (message, from_node)

    def abort_incoming(self, message_id: str):
        """Annule une réception en cours (contact perdu)."""
        self.incoming.pop(message_id, None)

    def on_message_arrived(self, message_id: str, from_node):
        """
        Fin de réception d'un message.

        Args:
            message_id (str): identifiant du message reçu
            from_node (Node): nœud émetteur

        Returns:
            Message: le message reçu (éventuellement modifié), ou None si aucune
            réception n'était en cours pour cet identifiant
        """
        entry = self.incoming.pop(message_id, None)
        if entry is None:
            logger.warning("%s: aucun transfert entrant pour %s depuis %s",
                           self.host, message_id, from_node)
            return None
        message, _ = entry
        message.add_node_to_path(self.host)
        if self.world is not None:
            message.receive_time = self.world.time
        if message.to is self.host:
            self.delivered.add(message.id)
        self.add_to_buffer(message)
        return message

    def on_transfer_done(self, message, to_node):
        """Appelé côté émetteur lorsqu'un transfert s'est terminé."""

    def is_transferring(self) -> bool:
        if self.host is None:
            return False
        return any(con.is_transferring() for con in self.host.get_connections())

    def can_start_transfer(self) -> bool:
        if self.host is None or not self.messages:
            return False
        return len(self.host.get_connections()) > 0

    def try_messages_for_connected(self, candidates):
        """
        Essaie d'envoyer les couples (message, connexion) dans l'ordre donné
        jusqu'à ce qu'un transfert soit accepté.

        Args:
            candidates (list[tuple]): liste ordonnée de couples (Message, Connection)

        Returns:
            tuple: le couple accepté, ou None
        """
        if self.world is None:
            return None
        for message, con in candidates:
            if self.world.start_transfer(self.host, message, con):
                return message, con
        return None

    def is_deliverable(self, message) -> bool:
        """Indique si un message peut emprunter la livraison directe."""
        return True

    def exchange_deliverable_messages(self):
        """
        Tente de livrer directement les messages dont le destinataire final
        est un voisin connecté.

        Returns:
            tuple: le couple (message, connexion) accepté, ou None
        """
        candidates = []
        for con in self.host.get_connections():
            other = con.get_other_node(self.host)
            for message in self.sorted_by_queue_mode(self.get_message_collection()):
                if message.to is other and self.is_deliverable(message):
                    candidates.append((message, con))
        if not candidates:
            return None
        return self.try_messages_for_connected(candidates)

    def changed_connection(self, con):
        """Notification d'ouverture ou de fermeture d'un contact."""

    def update(self):
        """Exécute une étape de décision (appelée une fois par pas de temps)."""

    #*************** Mode de file ****************
    def queue_key(self, message):
        """
        Clé de tri des messages selon le mode de file.

        Returns:
            float: clé croissante (le plus petit passe en premier)
        """
        if self.queue_mode == 'random':
            return self.rng.random()
        return message.receive_time

    def sorted_by_queue_mode(self, messages):
        return sorted(messages, key=self.queue_key)

    #*************** Interrogation des pairs ****************
    def peer_router(self, con):
        """
        Renvoie le routeur du pair d'une connexion. L'accès n'est valide que
        tant que le contact est actif.

        Raises:
            ContactLostError: si la connexion n'est plus active
        """
        if not con.is_up():
            raise ContactLostError(con, self.host)
        return con.get_other_node(self.host).router

    def query_peer(self, con, name: str, *args):
        """
        Requête synchrone d'une valeur exposée par le routeur d'un pair.

        Args:
            con (Connection): connexion vers le pair
            name (str): nom de la méthode exposée par le pair
            *args: arguments de la requête

        Raises:
            ContactLostError: si la connexion n'est plus active
        """
        return getattr(self.peer_router(con), name)(*args)

    def get_routing_info(self) -> dict:
        """
        Résumé de l'état du routeur pour les rapports.

        Returns:
            dict: informations de routage
        """
        return {
            'host': str(self.host),
            'buffered': len(self.messages),
            'delivered': len(self.delivered)
        }
