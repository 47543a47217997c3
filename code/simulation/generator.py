# simulation/generator.py
"""
Générateur d'événements de création de messages (fourmis aller).
Tire deux hôtes distincts au hasard, une taille et un intervalle avant
l'événement suivant.
"""
from collections import namedtuple

import numpy as np

MessageCreateEvent = namedtuple('MessageCreateEvent',
                                ['time', 'from_id', 'to_id', 'id', 'size', 'response_size'],
                                defaults=(0,))


class MessageGenerator:
    """
    Générateur de messages entre hôtes aléatoires.
    """

    def __init__(self, num_nodes: int, interval=(5, 15), size=(200, 500), prefix='M',
                 window=None, response_size=0, seed=None):
        """
        Args:
            num_nodes (int): Nombre d'hôtes (ids 0..num_nodes-1)
            interval (tuple): Intervalle min/max entre deux créations
            size (tuple): Taille min/max des messages (octets)
            prefix (str): Préfixe des identifiants
            window (tuple, optional): Période (début, fin) de génération
            response_size (int): Taille des réponses demandées (0 = messages sans réponse)
            seed (int, optional): Graine aléatoire
        """
        if num_nodes < 2:
            raise ValueError("Il faut au moins deux hôtes pour générer des messages")
        if interval[1] <= 0:
            raise ValueError(f"L'intervalle de génération doit être positif, reçu {interval}")
        self.num_nodes = num_nodes
        self.interval = interval
        self.size = size
        self.prefix = prefix
        self.window = window
        self.response_size = response_size
        self.rng = np.random.default_rng(seed)
        self.next_time = float(window[0]) if window else 0.0
        self.count = 0

    def draw_hosts(self):
        """Tire deux hôtes différents."""
        from_id, to_id = self.rng.choice(self.num_nodes, size=2, replace=False)
        return int(from_id), int(to_id)

    def next_event(self):
        """
        Renvoie le prochain événement, ou None si la fenêtre de génération est terminée.
        """
        if self.window is not None and self.next_time > self.window[1]:
            return None
        from_id, to_id = self.draw_hosts()
        size = int(self.rng.integers(self.size[0], self.size[1] + 1))
        self.count += 1
        event = MessageCreateEvent(self.next_time, from_id, to_id,
                                   f"{self.prefix}{self.count}", size, self.response_size)
        self.next_time += float(self.rng.integers(self.interval[0], self.interval[1] + 1))
        return event

    def generate(self, end_time):
        """
        Génère tous les événements jusqu'à end_time.

        Returns:
            list[MessageCreateEvent]
        """
        events = []
        while self.next_time <= end_time:
            event = self.next_event()
            if event is None:
                break
            events.append(event)
        return events
