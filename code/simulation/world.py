# simulation/world.py
"""
Monde simulé minimal, piloté par pas de temps.

À chaque pas :
1. les transferts terminés sont remis aux routeurs destinataires ;
2. les événements de contact du pas sont appliqués (avant toute décision) ;
3. les messages du pas sont créés ;
4. chaque routeur libre et en contact exécute son étape de décision.
"""
import logging
import random
from collections import deque

from tqdm import tqdm

from config import TICK, TRANSFER_SPEED
from models.connection import Connection
from models.message import AntRole, Message
from models.node import Node

logger = logging.getLogger(__name__)

RESPONSE_PREFIX = 'R_'


class World:
    """
    Ordonnanceur des contacts, des créations de messages et des transferts.
    Il joue aussi le rôle d'exécuteur de transferts pour les routeurs.
    """

    def __init__(self, nodes, contact_events=(), message_events=(),
                 transfer_speed=TRANSFER_SPEED, tick=TICK, seed=None, listeners=None):
        """
        Args:
            nodes (list[Node]): nœuds du réseau (avec leur routeur)
            contact_events (iterable[ContactEvent]): ouvertures/fermetures de contacts
            message_events (iterable[MessageCreateEvent]): créations de messages
            transfer_speed (float): débit des contacts (octets par unité de temps)
            tick (float): durée d'un pas de temps
            seed (int, optional): graine pour l'ordre de traitement des nœuds
            listeners (list, optional): écouteurs d'événements (ex. MessageStats)
        """
        if tick <= 0:
            raise ValueError(f"Le pas de temps doit être strictement positif, reçu {tick}")
        self.nodes = {node.id: node for node in nodes}
        self.contact_events = deque(sorted(contact_events, key=lambda e: e.time))
        self.message_events = deque(sorted(message_events, key=lambda e: e.time))
        self.transfer_speed = transfer_speed
        self.tick = tick
        self.time = 0.0
        self.rng = random.Random(seed)
        self.listeners = list(listeners or [])
        self.connections = {}  # frozenset(id1, id2) -> Connection

        for node in nodes:
            if node.router is None:
                raise ValueError(f"Le nœud {node} n'a pas de routeur")
            node.router.attach(self)

    @classmethod
    def from_prototype(cls, num_nodes, prototype, **kwargs):
        """
        Crée un monde dont chaque nœud reçoit une réplique du routeur prototype.

        Args:
            num_nodes (int): nombre de nœuds
            prototype (DTNRouter): routeur modèle
        """
        nodes = [Node(i, prototype.replicate()) for i in range(num_nodes)]
        return cls(nodes, **kwargs)

    def get_node(self, node_id):
        try:
            return self.nodes[node_id]
        except KeyError:
            raise ValueError(f"Nœud inconnu: {node_id}") from None

    def _notify(self, event, *args):
        for listener in self.listeners:
            handler = getattr(listener, event, None)
            if handler is not None:
                handler(*args)

    #*************** Contacts ****************
    def connect(self, a, b):
        """
        Ouvre un contact entre deux nœuds et notifie les deux routeurs.

        Returns:
            Connection: la connexion ouverte (ou existante)
        """
        key = frozenset((a.id, b.id))
        if key in self.connections:
            logger.debug("Contact %s-%s déjà ouvert à t=%s", a, b, self.time)
            return self.connections[key]
        con = Connection(a, b, self.time)
        self.connections[key] = con
        a.add_connection(con)
        b.add_connection(con)
        a.router.changed_connection(con)
        b.router.changed_connection(con)
        return con

    def disconnect(self, a, b):
        """
        Ferme un contact, interrompt le transfert en cours et notifie les deux routeurs.

        Returns:
            Connection: la connexion fermée, ou None si aucun contact n'était ouvert
        """
        con = self.connections.pop(frozenset((a.id, b.id)), None)
        if con is None:
            logger.debug("Fin de contact %s-%s sans contact ouvert à t=%s", a, b, self.time)
            return None
        if con.is_transferring():
            message, sender = con.clear_transfer()
            receiver = con.get_other_node(sender)
            receiver.router.abort_incoming(message.id)
            self._notify('transfer_aborted', message, sender, receiver, self.time)
            logger.debug("Transfert de %s interrompu sur %s", message.id, con)
        con.set_up_state(False)
        a.remove_connection(con)
        b.remove_connection(con)
        a.router.changed_connection(con)
        b.router.changed_connection(con)
        return con

    #*************** Messages ****************
    def create_message(self, event):
        """
        Crée un message à partir d'un MessageCreateEvent.

        Returns:
            Message: le message créé
        """
        source = self.get_node(event.from_id)
        message = Message(source, self.get_node(event.to_id), event.id, event.size, self.time,
                          event.response_size)
        if source.router.create_new_message(message):
            self._notify('message_created', message, self.time)
        return message

    def create_response(self, request, node):
        """
        Crée la réponse à une requête livrée, depuis sa destination vers sa source.

        Args:
            request (Message): requête livrée (response_size > 0)
            node (Node): destinataire de la requête

        Returns:
            Message: la réponse créée
        """
        response = Message(node, request.from_node, RESPONSE_PREFIX + request.id,
                           request.response_size, self.time)
        if node.router.create_new_message(response):
            self._notify('message_created', response, self.time)
            logger.debug("%s: réponse %s créée pour %s", node, response.id, request.from_node)
        return response

    #*************** Transferts ****************
    def start_transfer(self, sender, message, con) -> bool:
        """
        Exécuteur de transferts : démarre l'envoi d'une copie du message
        si la connexion et le destinataire l'acceptent.

        Returns:
            bool: True si le transfert a démarré
        """
        if not con.is_up() or con.is_transferring():
            return False
        receiver = con.get_other_node(sender)
        if sender.router.is_transferring() or receiver.router.is_transferring():
            return False
        if not receiver.router.accepts(message):
            return False
        replica = message.replicate()
        receiver.router.receive_message(replica, sender)
        con.start_transfer(sender, replica, self.time, self.transfer_speed)
        self._notify('transfer_started', replica, sender, receiver, self.time)
        return True

    def _complete_transfers(self):
        for con in list(self.connections.values()):
            if not con.is_message_transferred(self.time):
                continue
            message, sender = con.clear_transfer()
            receiver = con.get_other_node(sender)
            arrived = receiver.router.on_message_arrived(message.id, sender)
            if arrived is None:
                continue
            sender.router.on_transfer_done(arrived, receiver)
            self._notify('message_relayed', arrived, sender, receiver, self.time)
            if arrived.to is receiver and arrived.response_size > 0:
                self.create_response(arrived, receiver)
            if arrived.ant_role is AntRole.BACKWARD and not receiver.router.has_message(arrived.id):
                self._notify('ant_returned', arrived, receiver, self.time)

    #*************** Boucle principale ****************
    def step(self):
        """Exécute un pas de temps."""
        self._complete_transfers()

        while self.contact_events and self.contact_events[0].time <= self.time:
            event = self.contact_events.popleft()
            a, b = self.get_node(event.a), self.get_node(event.b)
            if event.up:
                self.connect(a, b)
            else:
                self.disconnect(a, b)

        while self.message_events and self.message_events[0].time <= self.time:
            self.create_message(self.message_events.popleft())

        order = list(self.nodes.values())
        self.rng.shuffle(order)
        for node in order:
            if node.router.is_transferring() or not node.get_connections():
                continue
            node.router.update()

        self.time += self.tick

    def run(self, end_time, progress=False):
        """
        Exécute la simulation jusqu'à end_time (exclu).

        Args:
            end_time (float): instant de fin
            progress (bool): affiche une barre de progression
        """
        steps = max(0, int(round((end_time - self.time) / self.tick)))
        iterator = range(steps)
        if progress:
            iterator = tqdm(iterator, desc="Simulation", unit="pas")
        for _ in iterator:
            self.step()
        logger.info("Simulation terminée à t=%s", self.time)
